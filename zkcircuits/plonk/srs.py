"""
PLONK Structured Reference String (SRS)
=========================================

KZG 커밋먼트용 범용(universal) 공개 파라미터.

  SRS = {
      G1 powers: [G1, τ·G1, τ²·G1, ..., τ^d·G1]
      G2 powers: [G2, τ·G2]
  }

회로에 독립적이므로 도메인 크기 n = 2^k 마다 한 번 만들어 재사용한다
(KeyManager가 k별로 캐시한다). 필요한 최대 차수는 n + 5
(블라인딩된 배선·누적자 다항식과 t_hi, W_ζ) 이며 여유를 두어
required_degree()를 사용한다.

**toxic waste τ**:
  seed가 주어지면 SHA-256(seed)에서 결정론적으로 유도한다 (테스트·재현용).
  seed가 없으면 OS 난수(secrets)로 뽑고, 생성 직후 버린다.
"""

import hashlib
import secrets

from zkcircuits.plonk.field import FR, G1, G2, ec_mul, CURVE_ORDER


def required_degree(n):
    """도메인 크기 n의 증명에 필요한 SRS 최대 차수."""
    return n + 8


class SRS:
    """Structured Reference String.

    속성:
        g1_powers: [G1, τ·G1, ..., τ^d·G1]
        g2_powers: [G2, τ·G2]
        max_degree: 지원하는 최대 다항식 차수 d
    """

    def __init__(self, g1_powers, g2_powers, max_degree):
        self.g1_powers = g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree

    @classmethod
    def generate(cls, max_degree, seed=None):
        """SRS를 생성한다.

        Args:
            max_degree: 지원할 최대 다항식 차수
            seed: 결정론적 생성을 위한 시드 (None이면 난수 τ)

        Returns:
            SRS
        """
        if seed is not None:
            h = hashlib.sha256(str(seed).encode()).digest()
            tau_int = int.from_bytes(h, "big") % CURVE_ORDER
        else:
            tau_int = secrets.randbelow(CURVE_ORDER - 1) + 1
        tau = FR(tau_int)

        g1_powers = []
        tau_power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(ec_mul(G1, tau_power))
            tau_power = tau_power * tau

        g2_powers = [G2, ec_mul(G2, tau)]
        return cls(g1_powers, g2_powers, max_degree)

    @classmethod
    def for_domain(cls, n, seed=None):
        """도메인 크기 n에 맞는 SRS."""
        return cls.generate(required_degree(n), seed=seed)
