"""
PLONK 전처리기 (Preprocessor)
===============================

회로 구조가 정해지면 셀렉터 다항식과 순열 다항식을 한 번 계산하고 커밋한다.

**출력물**:
  - 셀렉터 커밋먼트: [q_L]₁, [q_R]₁, [q_O]₁, [q_M]₁, [q_C]₁
  - 순열 커밋먼트:   [S_σ1]₁, [S_σ2]₁, [S_σ3]₁
  - 도메인 정보:     n, ω
  - (Prover용) 셀렉터/순열 평가값과 다항식

Verifier는 커밋먼트와 n, 공개 입력 수만 필요하다. 검증 키에서 복원한
PreprocessedData는 다항식 필드가 None이다.
"""

from zkcircuits.plonk.field import get_root_of_unity, get_roots_of_unity
from zkcircuits.plonk.polynomial import Polynomial
from zkcircuits.plonk.kzg import commit
from zkcircuits.plonk.permutation import build_permutation_polynomials


SELECTOR_NAMES = ("q_l", "q_r", "q_o", "q_m", "q_c")
SIGMA_NAMES = ("s_sigma1", "s_sigma2", "s_sigma3")


class PreprocessedData:
    """전처리된 회로 데이터.

    속성 (도메인):
        n, omega, domain

    속성 (셀렉터):
        selector_evals: {이름: 길이 n 평가값}
        q_l_poly ... q_c_poly, q_l_comm ... q_c_comm

    속성 (순열):
        sigma: 길이 3n 순열 배열
        s_sigma1_poly ... s_sigma3_poly, s_sigma1_comm ... s_sigma3_comm

    속성 (회로 정보):
        num_public_inputs
    """

    def __init__(self, n, num_public_inputs):
        self.n = n
        self.omega = get_root_of_unity(n)
        self.domain = get_roots_of_unity(n)
        self.num_public_inputs = num_public_inputs
        self.selector_evals = None
        self.sigma = None
        self.sigma_evals = None
        for name in SELECTOR_NAMES + SIGMA_NAMES:
            setattr(self, f"{name}_poly", None)
            setattr(self, f"{name}_comm", None)

    def commitments(self):
        """(레이블, 커밋먼트) 쌍을 고정 순서로 반환한다."""
        return [
            (name.encode(), getattr(self, f"{name}_comm"))
            for name in SELECTOR_NAMES + SIGMA_NAMES
        ]

    def has_polynomials(self):
        return self.q_l_poly is not None

    def interpolate(self, selector_evals, sigma):
        """평가값에서 셀렉터·순열 다항식을 복원한다 (커밋하지 않음)."""
        self.selector_evals = selector_evals
        self.sigma = sigma
        for name in SELECTOR_NAMES:
            poly = Polynomial.from_evaluations(selector_evals[name], self.omega)
            setattr(self, f"{name}_poly", poly)
        sigma_evals = build_permutation_polynomials(sigma, self.n, self.domain)
        for name, evals in zip(SIGMA_NAMES, sigma_evals):
            setattr(self, f"{name}_poly", Polynomial.from_evaluations(evals, self.omega))
        self.sigma_evals = sigma_evals

    def commit_all(self, srs):
        for name in SELECTOR_NAMES + SIGMA_NAMES:
            setattr(self, f"{name}_comm", commit(getattr(self, f"{name}_poly"), srs))


def preprocess(circuit, srs, n=None):
    """회로를 전처리한다.

    단계:
    1. 도메인 설정: n (기본값은 게이트 수 이상의 2의 거듭제곱)
    2. 셀렉터 벡터를 0-게이트로 패딩 → IFFT → KZG 커밋
    3. copy constraint로 σ 생성 → 다항식화 → KZG 커밋

    Args:
        circuit: Circuit 객체 (변경하지 않는다)
        srs: SRS
        n: 도메인 크기 (2의 거듭제곱)

    Returns:
        PreprocessedData

    Raises:
        ValueError: 게이트 수가 n을 초과할 때
    """
    if n is None:
        n = 1
        while n < max(circuit.n, 2):
            n <<= 1
    selectors = circuit.get_selector_polynomials(n)
    selector_evals = dict(zip(SELECTOR_NAMES, selectors))

    result = PreprocessedData(n, circuit.num_public_inputs)
    result.interpolate(selector_evals, circuit.build_copy_constraints(n))
    result.commit_all(srs)
    return result
