"""
PLONK Fiat-Shamir Transcript
==============================

Prover와 Verifier가 같은 순서로 메시지를 추가하면 같은 챌린지를 얻는다.

**챌린지 순서**:
  [a],[b],[c]          → β, γ
  [z]                  → α
  [t_lo],[t_mid],[t_hi] → ζ
  ā, b̄, c̄, s̄σ1, s̄σ2, z̄ω, r̄ → v
  [W_ζ], [W_ζω]        → u

absorb_statement()가 도메인 크기, 전처리 커밋먼트, 공개 입력을 먼저 흡수하여
챌린지를 회로와 공개 입력에 묶는다.
"""

import hashlib

from zkcircuits.plonk.field import FR, CURVE_ORDER, ec_normalize


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    속성:
        state: 누적된 해시 입력 바이트열
    """

    def __init__(self, label=b"zkcircuits-plonk"):
        self.state = bytearray()
        self.state.extend(label)

    def append_scalar(self, label, scalar):
        """FR 스칼라를 32바이트 빅엔디안으로 추가한다."""
        self.state.extend(label)
        self.state.extend((int(scalar) % CURVE_ORDER).to_bytes(32, "big"))

    def append_point(self, label, point):
        """G1 점을 아핀 좌표 64바이트로 추가한다 (무한원점은 0 64바이트)."""
        self.state.extend(label)
        affine = ec_normalize(point)
        if affine is None:
            self.state.extend(b"\x00" * 64)
        else:
            x, y = affine
            self.state.extend(x.n.to_bytes(32, "big"))
            self.state.extend(y.n.to_bytes(32, "big"))

    def challenge_scalar(self, label):
        """현재 상태를 해싱하여 챌린지를 만들고, 해시를 상태에 체이닝한다."""
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        self.state.extend(h)
        return FR(int.from_bytes(h, "big") % CURVE_ORDER)


def absorb_statement(transcript, preprocessed, public_inputs):
    """회로(검증 키)와 공개 입력을 트랜스크립트에 흡수한다.

    Prover와 Verifier가 Round 1 이전에 동일하게 호출한다.
    """
    transcript.append_scalar(b"n", preprocessed.n)
    transcript.append_scalar(b"num_public_inputs", preprocessed.num_public_inputs)
    for label, point in preprocessed.commitments():
        transcript.append_point(label, point)
    for value in public_inputs:
        transcript.append_scalar(b"public_input", value)
