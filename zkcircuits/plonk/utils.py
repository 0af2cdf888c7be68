"""
PLONK 공유 유틸리티
===================

**주요 기능**:
  - vanishing_poly_eval: Z_H(ζ) = ζ^n - 1
  - lagrange_basis_eval: L_i(ζ)
  - public_input_polynomial / public_input_poly_eval: PI(x), PI(ζ)
  - next_power_of_2

**공개 입력 부호 규약**:
  공개 입력 게이트 i는 q_L = 1 이고 a_i = x_i 여야 하므로
  PI(ωⁱ) = -x_i 로 둔다:  a_i + PI(ωⁱ) = 0.
  PI(x) = Σᵢ (-x_i) · Lᵢ(x)
"""

from zkcircuits.plonk.field import FR
from zkcircuits.plonk.polynomial import Polynomial


def vanishing_poly_eval(n, zeta):
    """소거 다항식 Z_H(ζ) = ζ^n - 1."""
    return zeta ** n - FR(1)


def lagrange_basis_eval(i, n, omega, zeta):
    """i번째 Lagrange 기저 L_i(ζ) = (ωⁱ / n) · (ζ^n - 1) / (ζ - ωⁱ).

    ζ가 도메인 원소이면 크로네커 델타 값을 반환한다.
    """
    if not isinstance(zeta, FR):
        zeta = FR(zeta)

    omega_i = omega ** i
    denominator = zeta - omega_i
    if denominator == 0:
        return FR(1)
    zh_zeta = vanishing_poly_eval(n, zeta)
    if zh_zeta == 0:
        return FR(0)
    return zh_zeta * omega_i / (FR(n) * denominator)


def public_input_polynomial(pub_inputs, n, omega):
    """공개 입력 다항식 PI(x) = Σᵢ (-x_i) · Lᵢ(x).

    Args:
        pub_inputs: 공개 입력 리스트 [x₀, x₁, ...]
        n: 도메인 크기
        omega: n차 원시 단위근

    Returns:
        Polynomial
    """
    if not pub_inputs:
        return Polynomial.zero()
    evals = [FR(0)] * n
    for i, val in enumerate(pub_inputs):
        evals[i] = FR(0) - FR(val)
    return Polynomial.from_evaluations(evals, omega)


def public_input_poly_eval(pub_inputs, n, omega, zeta):
    """PI(ζ)를 Lagrange 기저 평가값으로 직접 계산한다 (Verifier용)."""
    result = FR(0)
    for i, val in enumerate(pub_inputs):
        result = result - FR(val) * lagrange_basis_eval(i, n, omega, zeta)
    return result


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱."""
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p
