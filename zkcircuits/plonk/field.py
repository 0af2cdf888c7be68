"""
PLONK 백엔드: 유한체(Finite Field) 및 타원곡선 연산
=====================================================

백엔드 전체가 공유하는 대수적 도구를 정의한다.

**유한체 FR**:
  BN254(bn128) 곡선의 스칼라 필드. 회로의 모든 셀 값, 셀렉터,
  공개 입력, 챌린지는 이 필드의 원소이다.
  - 위수 p ≈ 2^254, p - 1 = 2^28 × m → 최대 2^28차 단위근

**타원곡선 연산**:
  py_ecc.optimized_bn128 의 야코비안(Jacobian) 좌표 점을 사용한다.
  점은 (x, y, z) 튜플이며, 같은 점이라도 표현이 여러 개일 수 있으므로
  비교는 반드시 ec_eq()로, 직렬화는 ec_normalize()로 한다.
  무한원점(항등원)은 Z1 / Z2 이다.

**단위근(Roots of Unity)**:
  평가 도메인 H = {1, ω, ..., ω^(n-1)} 과 FFT에 사용한다.

사용 예시:
    >>> from zkcircuits.plonk.field import FR, G1, ec_mul, ec_normalize
    >>> P = ec_mul(G1, FR(5))
    >>> x, y = ec_normalize(P)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc.fields import optimized_bn128_FQ as CurveFQ
from py_ecc.fields import optimized_bn128_FQ2 as CurveFQ2
from py_ecc import optimized_bn128 as curve


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """BN254 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ를 상속하여 +, -, *, /, ** 를 그대로 사용한다.

    예시:
        >>> FR(3) * FR(3)      # FR(9)
        >>> FR(1) / FR(3)      # 3의 모듈러 역원
        >>> FR(-1) == FR(CURVE_ORDER - 1)
    """
    field_modulus = curve.curve_order

    def __int__(self):
        return self.n


# 곡선 위수 (필드 크기)
CURVE_ORDER = curve.curve_order

# 베이스 필드 크기 (좌표 검증용)
FIELD_MODULUS = curve.field_modulus


# ─────────────────────────────────────────────────────────────────────
# 타원곡선 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

G1 = curve.G1
G2 = curve.G2

# 무한원점 (야코비안 z = 0)
Z1 = curve.Z1
Z2 = curve.Z2


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point.

    Args:
        point: G1 또는 G2 위의 점 (야코비안)
        scalar: 정수 또는 FR 원소

    Returns:
        scalar · point
    """
    return curve.multiply(point, int(scalar) % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2. 무한원점과 같은 점의 덧셈도 처리한다."""
    return curve.add(p1, p2)


def ec_double(point):
    """2 · point."""
    return curve.double(point)


def ec_neg(point):
    """-point (y좌표 반전)."""
    return curve.neg(point)


def ec_eq(p1, p2):
    """두 야코비안 점이 같은 점인지 비교한다."""
    return curve.eq(p1, p2)


def ec_is_inf(point):
    """무한원점 여부."""
    return curve.is_inf(point)


def ec_normalize(point):
    """야코비안 점을 아핀 좌표 (x, y)로 변환한다.

    무한원점은 None을 반환한다.
    """
    if curve.is_inf(point):
        return None
    return curve.normalize(point)


def g1_from_affine(x, y):
    """아핀 좌표 정수 (x, y)로 G1 점을 만든다.

    Raises:
        ValueError: 좌표가 필드 범위를 벗어나거나 곡선 위의 점이 아닐 때
    """
    if not (0 <= x < FIELD_MODULUS and 0 <= y < FIELD_MODULUS):
        raise ValueError("G1 좌표가 베이스 필드 범위를 벗어났습니다")
    point = (CurveFQ(x), CurveFQ(y), CurveFQ.one())
    if not curve.is_on_curve(point, curve.b):
        raise ValueError("G1 곡선 위의 점이 아닙니다")
    return point


def g2_from_affine(x, y):
    """아핀 좌표 ((x0, x1), (y0, y1))로 G2 점을 만든다.

    트위스트 곡선의 코팩터가 1이 아니므로 곡선 위의 점이라도
    r · P = O (위수 r 부분군) 를 따로 확인한다.

    Raises:
        ValueError: 좌표가 필드 범위를 벗어나거나, 곡선 위의 점이 아니거나,
                    위수 r 부분군에 속하지 않을 때
    """
    for c in (*x, *y):
        if not 0 <= c < FIELD_MODULUS:
            raise ValueError("G2 좌표가 베이스 필드 범위를 벗어났습니다")
    point = (CurveFQ2(list(x)), CurveFQ2(list(y)), CurveFQ2.one())
    if not curve.is_on_curve(point, curve.b2):
        raise ValueError("G2 곡선 위의 점이 아닙니다")
    # ec_mul은 스칼라를 r로 줄이므로 curve.multiply를 직접 쓴다
    if not curve.is_inf(curve.multiply(point, CURVE_ORDER)):
        raise ValueError("G2 점이 위수 r 부분군에 속하지 않습니다")
    return point


def ec_pairing(g2_point, g1_point):
    """쌍선형 페어링 e(G1, G2) → GT.

    주의:
        py_ecc의 pairing 인자 순서는 (G2, G1)이다.
    """
    return curve.pairing(g2_point, g1_point)


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근 ω를 반환한다.

    생성자 g = FR(5)에 대해 ω = g^((p-1)/n).

    Args:
        n: 2의 거듭제곱, ≤ 2^28

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << 28):
        raise ValueError(f"n은 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)
    return FR(5) ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """도메인 [1, ω, ω², ..., ω^(n-1)] 을 반환한다."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
