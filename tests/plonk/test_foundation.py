"""
PLONK 기초 모듈 테스트: field, polynomial, utils

테스트 범위:
  - FR 산술, 음수/모듈러 정규화, int 변환
  - 단위근 (원시성, 잘못된 n)
  - Polynomial 산술, 평가, FFT/IFFT, 곱셈 경로 일치
  - 소거 다항식 나눗셈, 선형 나눗셈
  - Lagrange 기저, PI(x), next_power_of_2
"""

import pytest

from zkcircuits.plonk.field import (
    FR, CURVE_ORDER, get_root_of_unity, get_roots_of_unity,
)
from zkcircuits.plonk.polynomial import (
    Polynomial, fft, ifft, fft_multiply, divide_by_linear,
)
from zkcircuits.plonk.utils import (
    vanishing_poly_eval,
    lagrange_basis_eval,
    public_input_polynomial,
    public_input_poly_eval,
    next_power_of_2,
)


# ─────────────────────────────────────────────────────────────────────
# FR
# ─────────────────────────────────────────────────────────────────────

class TestFR:
    """FR 유한체 연산."""

    def test_basic_arithmetic(self):
        assert FR(3) + FR(4) == FR(7)
        assert FR(3) * FR(4) == FR(12)
        assert FR(10) - FR(4) == FR(6)

    def test_negative_wraps_to_modulus(self):
        """FR(-1)은 p-1과 같다."""
        assert FR(-1) == FR(CURVE_ORDER - 1)

    def test_inverse(self):
        assert FR(3) * (FR(1) / FR(3)) == FR(1)

    def test_int_conversion(self):
        assert int(FR(42)) == 42
        assert int(FR(-1)) == CURVE_ORDER - 1


# ─────────────────────────────────────────────────────────────────────
# 단위근
# ─────────────────────────────────────────────────────────────────────

class TestRootsOfUnity:

    @pytest.mark.parametrize("n", [2, 4, 8, 16])
    def test_primitive_root(self, n):
        """ωⁿ = 1 이고 ω^(n/2) ≠ 1."""
        omega = get_root_of_unity(n)
        assert omega ** n == FR(1)
        assert omega ** (n // 2) != FR(1)

    def test_domain_elements_are_distinct(self):
        domain = get_roots_of_unity(8)
        assert len(set(int(x) for x in domain)) == 8
        assert domain[0] == FR(1)

    def test_non_power_of_two_rejected(self):
        with pytest.raises(ValueError):
            get_root_of_unity(6)

    def test_too_large_rejected(self):
        with pytest.raises(ValueError):
            get_root_of_unity(1 << 29)


# ─────────────────────────────────────────────────────────────────────
# Polynomial
# ─────────────────────────────────────────────────────────────────────

class TestPolynomial:
    """Polynomial 산술."""

    def test_trims_leading_zeros(self):
        p = Polynomial([1, 2, 0, 0])
        assert p.degree == 1
        assert p.coeffs == [FR(1), FR(2)]

    def test_zero_polynomial(self):
        assert Polynomial().is_zero()
        assert Polynomial([]).is_zero()
        assert Polynomial.zero().degree == 0

    def test_evaluate(self):
        """p(x) = 1 + 2x + 3x² 에서 p(2) = 17."""
        assert Polynomial([1, 2, 3]).evaluate(2) == FR(17)

    def test_add_sub(self):
        p = Polynomial([1, 2])
        q = Polynomial([3, 4, 5])
        assert p + q == Polynomial([4, 6, 5])
        assert q - p == Polynomial([2, 2, 5])
        assert p - p == Polynomial.zero()

    def test_scalar_ops(self):
        p = Polynomial([1, 2])
        assert p * 3 == Polynomial([3, 6])
        assert 3 * p == Polynomial([3, 6])
        assert p + 1 == Polynomial([2, 2])
        assert 1 - p == Polynomial([0, -2])

    def test_multiply(self):
        """(1 + x)(1 - x) = 1 - x²."""
        assert Polynomial([1, 1]) * Polynomial([1, -1]) == Polynomial([1, 0, -1])

    def test_fft_multiply_matches_schoolbook(self):
        """FFT 곱셈 경로와 학교식 곱셈이 같은 결과를 낸다."""
        a = [FR(i * 7 + 1) for i in range(70)]
        b = [FR(i * 3 + 2) for i in range(70)]
        expected = [FR(0)] * (len(a) + len(b) - 1)
        for i, x in enumerate(a):
            for j, y in enumerate(b):
                expected[i + j] = expected[i + j] + x * y
        assert fft_multiply(a, b) == expected
        assert Polynomial(a) * Polynomial(b) == Polynomial(expected)

    def test_shift_argument(self):
        """p(2x) for p = 1 + x + x² is 1 + 2x + 4x²."""
        assert Polynomial([1, 1, 1]).shift_argument(FR(2)) == Polynomial([1, 2, 4])

    def test_vanishing(self):
        zh = Polynomial.vanishing(4)
        for x in get_roots_of_unity(4):
            assert zh.evaluate(x) == FR(0)


class TestFFT:

    def test_fft_evaluates_on_domain(self):
        coeffs = [FR(1), FR(2), FR(3), FR(4)]
        omega = get_root_of_unity(4)
        evals = fft(coeffs, omega)
        p = Polynomial(coeffs)
        for x, y in zip(get_roots_of_unity(4), evals):
            assert p.evaluate(x) == y

    def test_ifft_inverts_fft(self):
        coeffs = [FR(5), FR(0), FR(7), FR(11), FR(1), FR(2), FR(3), FR(4)]
        omega = get_root_of_unity(8)
        assert ifft(fft(coeffs, omega), omega) == coeffs

    def test_from_evaluations(self):
        evals = [FR(3), FR(1), FR(4), FR(1)]
        omega = get_root_of_unity(4)
        p = Polynomial.from_evaluations(evals, omega)
        assert [p.evaluate(x) for x in get_roots_of_unity(4)] == evals


# ─────────────────────────────────────────────────────────────────────
# 나눗셈
# ─────────────────────────────────────────────────────────────────────

class TestDivision:

    def test_divide_by_vanishing_exact(self):
        q = Polynomial([1, 2, 3])
        p = q * Polynomial.vanishing(4)
        assert p.divide_by_vanishing(4) == q

    def test_divide_by_vanishing_remainder_raises(self):
        p = Polynomial.vanishing(4) + Polynomial([1])
        with pytest.raises(ValueError):
            p.divide_by_vanishing(4)

    def test_divide_by_vanishing_low_degree(self):
        assert Polynomial.zero().divide_by_vanishing(4) == Polynomial.zero()
        with pytest.raises(ValueError):
            Polynomial([1, 1]).divide_by_vanishing(4)

    def test_divide_by_linear(self):
        """(p(x) - p(z)) / (x - z) · (x - z) + p(z) == p(x)."""
        p = Polynomial([7, 0, 3, 5])
        z = FR(9)
        q = divide_by_linear(p, z)
        assert q * Polynomial([FR(0) - z, 1]) + p.evaluate(z) == p

    def test_divide_by_linear_constant(self):
        assert divide_by_linear(Polynomial([5]), FR(2)) == Polynomial.zero()


# ─────────────────────────────────────────────────────────────────────
# utils
# ─────────────────────────────────────────────────────────────────────

class TestUtils:

    def test_vanishing_eval(self):
        assert vanishing_poly_eval(4, FR(2)) == FR(15)

    def test_lagrange_kronecker_on_domain(self):
        n = 8
        omega = get_root_of_unity(n)
        domain = get_roots_of_unity(n)
        assert lagrange_basis_eval(3, n, omega, domain[3]) == FR(1)
        assert lagrange_basis_eval(3, n, omega, domain[5]) == FR(0)

    def test_lagrange_sums_to_one(self):
        """Σᵢ Lᵢ(ζ) = 1."""
        n = 4
        omega = get_root_of_unity(n)
        zeta = FR(123456789)
        total = FR(0)
        for i in range(n):
            total = total + lagrange_basis_eval(i, n, omega, zeta)
        assert total == FR(1)

    def test_public_input_polynomial(self):
        """PI(ωⁱ) = -xᵢ, 나머지 행은 0."""
        n = 4
        omega = get_root_of_unity(n)
        domain = get_roots_of_unity(n)
        pi = public_input_polynomial([FR(5), FR(7)], n, omega)
        assert pi.evaluate(domain[0]) == FR(-5)
        assert pi.evaluate(domain[1]) == FR(-7)
        assert pi.evaluate(domain[2]) == FR(0)
        assert pi.evaluate(domain[3]) == FR(0)

    def test_public_input_eval_matches_polynomial(self):
        n = 8
        omega = get_root_of_unity(n)
        inputs = [FR(3), FR(1), FR(4)]
        zeta = FR(987654321)
        pi = public_input_polynomial(inputs, n, omega)
        assert public_input_poly_eval(inputs, n, omega, zeta) == pi.evaluate(zeta)

    def test_empty_public_inputs(self):
        assert public_input_polynomial([], 4, get_root_of_unity(4)).is_zero()

    @pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (2, 2), (3, 4), (17, 32)])
    def test_next_power_of_2(self, n, expected):
        assert next_power_of_2(n) == expected
