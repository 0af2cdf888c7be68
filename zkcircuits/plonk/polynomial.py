"""
PLONK 백엔드: 다항식(Polynomial) 클래스 및 FFT
================================================

**Polynomial 클래스**:
  계수 표현 p(x) = c₀ + c₁·x + c₂·x² + ... 의 다항식.
  +, -, *, 스칼라곱, 평가(Horner)를 지원한다.

**곱셈 전략**:
  - 작은 다항식: O(n²) 나이브 합성곱
  - 큰 다항식 (FFT_THRESHOLD 이상): FFT로 평가 → 점별 곱 → IFFT
  Round 3의 제약 다항식은 차수가 4n을 넘으므로 FFT 곱셈이 필수적이다.

**소거 다항식 나눗셈**:
  x^n - 1 로의 나눗셈은 q[i] = r[i+n] + q[i+n] 점화식으로 O(deg) 에 끝난다.

사용 예시:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))                       # FR(17)
"""

from zkcircuits.plonk.field import FR, get_root_of_unity


# 이 길이 이상의 두 다항식 곱은 FFT로 계산한다
FFT_THRESHOLD = 64


# ─────────────────────────────────────────────────────────────────────
# Polynomial 클래스
# ─────────────────────────────────────────────────────────────────────

class Polynomial:
    """유한체 FR 위의 다항식.

    계수 리스트로 표현: coeffs = [c₀, c₁, c₂, ...]

    백엔드에서의 역할:
    - 배선 다항식 a(x), b(x), c(x)
    - 셀렉터 다항식 q_L(x), ..., q_C(x), 순열 다항식 S_σ(x)
    - 몫 다항식 t(x), 선형화 다항식 r(x), 열기 증명 W(x)
    """

    def __init__(self, coeffs=None):
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
            if not self.coeffs:
                self.coeffs = [FR(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거한다."""
        while len(self.coeffs) > 1 and self.coeffs[-1] == 0:
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == 0

    def evaluate(self, point):
        """Horner's method로 p(point)를 계산한다."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        longer, shorter = (
            (self.coeffs, other.coeffs)
            if len(self.coeffs) >= len(other.coeffs)
            else (other.coeffs, self.coeffs)
        )
        result = list(longer)
        for i, c in enumerate(shorter):
            result[i] = result[i] + c
        return Polynomial(result)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return self + (-other)

    def __rsub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return other.__sub__(self)

    def __neg__(self):
        return Polynomial([FR(0) - c for c in self.coeffs])

    def __mul__(self, other):
        """다항식 곱셈 또는 스칼라곱.

        두 다항식이 모두 FFT_THRESHOLD 이상이면 FFT 곱셈을 사용한다.
        """
        if isinstance(other, (int, FR)):
            if isinstance(other, int):
                other = FR(other)
            return Polynomial([c * other for c in self.coeffs])
        if self.is_zero() or other.is_zero():
            return Polynomial.zero()
        if min(len(self.coeffs), len(other.coeffs)) >= FFT_THRESHOLD:
            return Polynomial(fft_multiply(self.coeffs, other.coeffs))
        result = [FR(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == 0:
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        return len(self.coeffs)

    def scale(self, scalar):
        return self * scalar

    def shift_argument(self, factor):
        """p(factor · x)의 계수를 반환한다: cᵢ → factorⁱ · cᵢ.

        Round 3에서 z(ω·x)를 구성할 때 사용한다.
        """
        result = []
        power = FR(1)
        for c in self.coeffs:
            result.append(c * power)
            power = power * factor
        return Polynomial(result)

    def divide_by_vanishing(self, n):
        """Z_H(x) = x^n - 1 로 나눈다.

        p(x) = q(x)·(x^n - 1) + r(x) 에서 계수를 높은 차수부터 결정한다:
            q[i] = p[i+n] + q[i+n]

        Raises:
            ValueError: 나머지가 0이 아닌 경우 (제약 불만족)
        """
        coeffs = self.coeffs
        deg = len(coeffs) - 1
        if deg < n:
            if self.is_zero():
                return Polynomial.zero()
            raise ValueError("소거 다항식으로 나누어 떨어지지 않습니다 (제약 불만족)")
        quotient = [FR(0)] * (deg - n + 1)
        for i in range(deg - n, -1, -1):
            upper = quotient[i + n] if i + n <= deg - n else FR(0)
            quotient[i] = coeffs[i + n] + upper
        # 나머지: r[i] = p[i] + q[i]  (i < n)
        for i in range(n):
            q_i = quotient[i] if i < len(quotient) else FR(0)
            if coeffs[i] + q_i != 0:
                raise ValueError(
                    "소거 다항식으로 나누어 떨어지지 않습니다 (제약 불만족)"
                )
        return Polynomial(quotient)

    @classmethod
    def zero(cls):
        return cls([FR(0)])

    @classmethod
    def one(cls):
        return cls([FR(1)])

    @classmethod
    def vanishing(cls, n):
        """소거 다항식 Z_H(x) = x^n - 1."""
        coeffs = [FR(0)] * (n + 1)
        coeffs[0] = FR(-1)
        coeffs[n] = FR(1)
        return cls(coeffs)

    @classmethod
    def from_evaluations(cls, evals, omega):
        """도메인 위 평가값에서 다항식을 복원한다 (IFFT)."""
        return cls(ifft(evals, omega))


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT (Number Theoretic Transform)
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """재귀 Cooley-Tukey radix-2 FFT: 계수 → {1, ω, ..., ω^{n-1}} 위 평가값.

    Args:
        coeffs: 길이가 2의 거듭제곱인 FR 리스트
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    omega_sq = omega * omega
    even_vals = fft(coeffs[0::2], omega_sq)
    odd_vals = fft(coeffs[1::2], omega_sq)

    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """역 FFT: 평가값 → 계수. ω^{-1}로 FFT 후 n으로 나눈다."""
    n = len(evals)
    coeffs = fft(evals, FR(1) / omega)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


def fft_multiply(a_coeffs, b_coeffs):
    """FFT 기반 다항식 곱셈: O(n log n).

    결과 차수 + 1 이상의 2의 거듭제곱 도메인에서 두 다항식을 평가하고
    점별로 곱한 뒤 보간한다.
    """
    result_len = len(a_coeffs) + len(b_coeffs) - 1
    size = 1
    while size < result_len:
        size <<= 1
    omega = get_root_of_unity(size)
    zero = FR(0)
    a_evals = fft(list(a_coeffs) + [zero] * (size - len(a_coeffs)), omega)
    b_evals = fft(list(b_coeffs) + [zero] * (size - len(b_coeffs)), omega)
    product = [x * y for x, y in zip(a_evals, b_evals)]
    return ifft(product, omega)[:result_len]


# ─────────────────────────────────────────────────────────────────────
# 다항식 나눗셈
# ─────────────────────────────────────────────────────────────────────

def divide_by_linear(poly, point):
    """(p(x) - p(z)) / (x - z) 를 합성 나눗셈(synthetic division)으로 계산한다.

    KZG 열기 증명의 몫 다항식이며, 나머지 p(z)는 버린다.

    Args:
        poly: 피제수 다항식
        point: z (FR)

    Returns:
        Polynomial: 몫 다항식
    """
    coeffs = poly.coeffs
    if len(coeffs) == 1:
        return Polynomial.zero()
    quotient = [FR(0)] * (len(coeffs) - 1)
    carry = FR(0)
    for i in range(len(coeffs) - 1, 0, -1):
        carry = coeffs[i] + carry * point
        quotient[i - 1] = carry
    return Polynomial(quotient)
