"""
KZG 다항식 커밋먼트 스킴
=========================

**커밋먼트**: C = p(τ)·G1 = Σᵢ cᵢ · [τⁱ]₁

**열기 증명**: p(z) = y 일 때 q(x) = (p(x) - y) / (x - z),  π = [q(τ)]₁
**검증**:       e(C - y·G1, G2) == e(π, [τ]₂ - z·G2)

**다중 스칼라 곱셈 (MSM)**:
  커밋먼트 계산 비용의 대부분은 Σ cᵢ·Pᵢ 이다. 계수가 IFFT 결과라
  거의 모두 254비트 난수이므로, 점마다 스칼라 곱을 하는 대신
  Pippenger 버킷 방식으로 c비트 윈도우마다 점을 버킷에 모아 더한다.

사용 예시:
    >>> C = commit(poly, srs)
    >>> proof = create_witness(poly, FR(7), srs)
    >>> verify_opening(C, proof, FR(7), poly.evaluate(FR(7)), srs)  # True
"""

from zkcircuits.plonk.field import (
    FR, G1, Z1, CURVE_ORDER,
    ec_mul, ec_add, ec_double, ec_neg, ec_pairing, ec_is_inf,
)
from zkcircuits.plonk.polynomial import divide_by_linear


SCALAR_BITS = CURVE_ORDER.bit_length()


def _window_size(count):
    if count < 8:
        return 2
    return max(3, count.bit_length() - 2)


def msm(points, scalars):
    """Pippenger 다중 스칼라 곱셈: Σ scalarsᵢ · pointsᵢ.

    Args:
        points: 야코비안 점 리스트
        scalars: 정수 또는 FR 리스트 (같은 길이)

    Returns:
        합 (무한원점 포함)
    """
    pairs = []
    for point, scalar in zip(points, scalars):
        s = int(scalar) % CURVE_ORDER
        if s:
            pairs.append((point, s))
    if not pairs:
        return Z1
    if len(pairs) == 1:
        return ec_mul(pairs[0][0], pairs[0][1])

    c = _window_size(len(pairs))
    mask = (1 << c) - 1
    num_windows = (SCALAR_BITS + c - 1) // c

    result = Z1
    for w in range(num_windows - 1, -1, -1):
        if not ec_is_inf(result):
            for _ in range(c):
                result = ec_double(result)

        shift = w * c
        buckets = [Z1] * mask
        for point, s in pairs:
            idx = (s >> shift) & mask
            if idx:
                buckets[idx - 1] = ec_add(buckets[idx - 1], point)

        # Σ k·bucket[k] = 누적합의 누적합
        running = Z1
        window_sum = Z1
        for bucket in reversed(buckets):
            running = ec_add(running, bucket)
            window_sum = ec_add(window_sum, running)
        result = ec_add(result, window_sum)

    return result


def commit(poly, srs):
    """다항식을 KZG 커밋한다: C = Σ cᵢ · [τⁱ]₁.

    Raises:
        ValueError: 다항식 차수가 SRS 최대 차수를 초과할 때
    """
    if poly.degree > srs.max_degree:
        raise ValueError(
            f"다항식 차수 {poly.degree}가 SRS 최대 차수 {srs.max_degree}를 초과합니다"
        )
    return msm(srs.g1_powers[:len(poly.coeffs)], poly.coeffs)


def create_witness(poly, point, srs):
    """p(z)에 대한 열기 증명 π = [(p(x) - p(z)) / (x - z)]₁ 을 만든다."""
    if not isinstance(point, FR):
        point = FR(point)
    return commit(divide_by_linear(poly, point), srs)


def verify_opening(commitment, proof, point, evaluation, srs):
    """KZG 열기 증명을 검증한다.

    e(C - y·G1, G2) == e(π, [τ]₂ - z·G2)

    Returns:
        bool: 검증 성공 여부
    """
    tau_g2 = srs.g2_powers[1]
    z_g2 = ec_mul(srs.g2_powers[0], point)
    tau_minus_z_g2 = ec_add(tau_g2, ec_neg(z_g2))

    c_minus_y = ec_add(commitment, ec_neg(ec_mul(G1, evaluation)))

    lhs = ec_pairing(srs.g2_powers[0], c_minus_y)
    rhs = ec_pairing(tau_minus_z_g2, proof)
    return lhs == rhs
