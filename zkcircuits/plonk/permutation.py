"""
PLONK 순열 인자 (Permutation Argument)
========================================

배선 복사 제약을 순열 σ로 인코딩하고 Grand Product로 증명한다.

**코셋 식별자 K1, K2**:
  3n개의 배선 위치를 서로 겹치지 않는 세 코셋에 대응시킨다.
  - a 배선: H,  b 배선: K1·H,  c 배선: K2·H

**누적자 z(x)**:
  z(ω⁰) = 1
  z(ωⁱ⁺¹) = z(ωⁱ) · ∏ₖ (wₖ + β·id_k + γ) / (wₖ + β·σₖ + γ)
"""

from zkcircuits.plonk.field import FR


K1 = FR(2)
K2 = FR(3)


def build_permutation_polynomials(sigma, n, domain):
    """순열 σ를 세 평가 벡터 S_σ1, S_σ2, S_σ3으로 인코딩한다.

    Args:
        sigma: 길이 3n 순열 배열
        n: 도메인 크기
        domain: [ω⁰, ..., ω^{n-1}]

    Returns:
        tuple: (s1_evals, s2_evals, s3_evals)
    """
    def position_to_value(pos):
        if pos < n:
            return domain[pos]
        elif pos < 2 * n:
            return K1 * domain[pos - n]
        return K2 * domain[pos - 2 * n]

    s_sigma1_evals = [position_to_value(sigma[i]) for i in range(n)]
    s_sigma2_evals = [position_to_value(sigma[n + i]) for i in range(n)]
    s_sigma3_evals = [position_to_value(sigma[2 * n + i]) for i in range(n)]
    return s_sigma1_evals, s_sigma2_evals, s_sigma3_evals


def compute_accumulator(a_vals, b_vals, c_vals, sigma_evals, n, domain, beta, gamma):
    """누적자 z의 평가값 [z(ω⁰)=1, ..., z(ω^{n-1})]을 계산한다.

    분모는 모두 모아 한 번에 역원을 구한다 (배치 역원).

    Args:
        a_vals, b_vals, c_vals: 배선 값 (길이 n)
        sigma_evals: (s1_evals, s2_evals, s3_evals)
        n: 도메인 크기
        domain: [ω⁰, ..., ω^{n-1}]
        beta, gamma: 챌린지

    Returns:
        list[FR]
    """
    s1, s2, s3 = sigma_evals

    numerators = []
    denominators = []
    for i in range(n - 1):
        numerators.append(
            (a_vals[i] + beta * domain[i] + gamma)
            * (b_vals[i] + beta * K1 * domain[i] + gamma)
            * (c_vals[i] + beta * K2 * domain[i] + gamma)
        )
        denominators.append(
            (a_vals[i] + beta * s1[i] + gamma)
            * (b_vals[i] + beta * s2[i] + gamma)
            * (c_vals[i] + beta * s3[i] + gamma)
        )

    inverses = batch_inverse(denominators)
    z_evals = [FR(1)]
    for num, den_inv in zip(numerators, inverses):
        z_evals.append(z_evals[-1] * num * den_inv)
    return z_evals


def batch_inverse(values):
    """Montgomery 트릭: 역원 하나로 모든 원소의 역원을 구한다.

    Raises:
        ZeroDivisionError: 0이 포함된 경우
    """
    if not values:
        return []
    prefix = [FR(1)]
    for v in values:
        prefix.append(prefix[-1] * v)
    if prefix[-1] == 0:
        raise ZeroDivisionError("0의 역원은 존재하지 않습니다")
    inv = FR(1) / prefix[-1]
    result = [FR(0)] * len(values)
    for i in range(len(values) - 1, -1, -1):
        result[i] = inv * prefix[i]
        inv = inv * values[i]
    return result
