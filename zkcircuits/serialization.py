"""
정규(canonical) 바이트 인코딩
===============================

  FR            32바이트 빅엔디안, 값 < 스칼라 필드 위수
  flag          1바이트, 0 또는 1
  G1            64바이트 (x ‖ y), 무한원점은 0 64바이트
  G2            128바이트 (x.c0 ‖ x.c1 ‖ y.c0 ‖ y.c1), 위수 r 부분군 검사
  공개 입력     u32 개수 ‖ FR...
  증명          G1 × 9 ‖ FR × 7  (800바이트 고정)
  wire record   [32바이트 공개 값][1바이트 flag][증명]

  검증 키       헤더 ‖ 전처리 커밋먼트 G1 × 8 ‖ SRS G2 × 2
    헤더:       u8 len ‖ kind ‖ u8 개수 ‖ (u8 len ‖ 이름 ‖ u32 값)... ‖ u8 k
                ‖ u32 공개 입력 수 ‖ 32바이트 지문
  증명 키       검증 키 ‖ u32 d+1 ‖ G1 × (d+1) ‖ 셀렉터 FR × 5n ‖ σ u32 × 3n

디코딩은 모든 바이트를 소비해야 한다. 잘리거나 남는 바이트, 범위 밖 값,
곡선 밖의 점은 InvalidEncoding 이다. 인코딩은 결정적이어서
encode(decode(b)) == b 이다.
"""

import struct

from zkcircuits.errors import InvalidEncoding
from zkcircuits.plonk.field import (
    FR, CURVE_ORDER, Z1, Z2,
    ec_normalize, g1_from_affine, g2_from_affine,
)
from zkcircuits.plonk.prover import Proof, PROOF_POINT_FIELDS, PROOF_SCALAR_FIELDS
from zkcircuits.plonk.preprocessor import SELECTOR_NAMES, SIGMA_NAMES


FR_SIZE = 32
G1_SIZE = 64
G2_SIZE = 128
PROOF_SIZE = len(PROOF_POINT_FIELDS) * G1_SIZE + len(PROOF_SCALAR_FIELDS) * FR_SIZE
RECORD_HEADER_SIZE = FR_SIZE + 1
NUM_COMMITMENTS = len(SELECTOR_NAMES) + len(SIGMA_NAMES)


class Reader:
    """바이트 커서. 부족하면 InvalidEncoding."""

    def __init__(self, data):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidEncoding(f"바이트열이 아닙니다: {type(data).__name__}")
        self.data = bytes(data)
        self.offset = 0

    def take(self, size):
        end = self.offset + size
        if end > len(self.data):
            raise InvalidEncoding(
                f"데이터가 잘렸습니다: {end}바이트가 필요하지만 {len(self.data)}바이트입니다"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self):
        return self.take(1)[0]

    def u32(self):
        return struct.unpack(">I", self.take(4))[0]

    def fr(self):
        return decode_fr(self.take(FR_SIZE))

    def g1(self):
        return decode_g1(self.take(G1_SIZE))

    def g2(self):
        return decode_g2(self.take(G2_SIZE))

    def text(self):
        raw = self.take(self.u8())
        try:
            return raw.decode("ascii")
        except UnicodeDecodeError as exc:
            raise InvalidEncoding("ASCII 문자열이 아닙니다") from exc

    def finish(self):
        if self.offset != len(self.data):
            raise InvalidEncoding(f"남는 바이트 {len(self.data) - self.offset}개")


def _u8(value):
    if not 0 <= value < 256:
        raise InvalidEncoding(f"u8 범위 밖: {value}")
    return bytes([value])


def _u32(value):
    return struct.pack(">I", value)


def _text(value):
    raw = value.encode("ascii")
    return _u8(len(raw)) + raw


# ─────────────────────────────────────────────────────────────────────
# 스칼라 / 플래그 / 점
# ─────────────────────────────────────────────────────────────────────

def encode_fr(value):
    return (int(value) % CURVE_ORDER).to_bytes(FR_SIZE, "big")


def decode_fr(data):
    if len(data) != FR_SIZE:
        raise InvalidEncoding(f"필드 원소는 {FR_SIZE}바이트여야 합니다: {len(data)}")
    value = int.from_bytes(data, "big")
    if value >= CURVE_ORDER:
        raise InvalidEncoding("필드 원소가 위수 이상입니다")
    return FR(value)


def encode_flag(flag):
    return b"\x01" if flag else b"\x00"


def decode_flag(data):
    if len(data) != 1 or data[0] not in (0, 1):
        raise InvalidEncoding(f"플래그 바이트는 0 또는 1이어야 합니다: {data!r}")
    return data[0] == 1


def encode_g1(point):
    affine = ec_normalize(point)
    if affine is None:
        return b"\x00" * G1_SIZE
    x, y = affine
    return x.n.to_bytes(32, "big") + y.n.to_bytes(32, "big")


def decode_g1(data):
    if len(data) != G1_SIZE:
        raise InvalidEncoding(f"G1 점은 {G1_SIZE}바이트여야 합니다: {len(data)}")
    if data == b"\x00" * G1_SIZE:
        return Z1
    x = int.from_bytes(data[:32], "big")
    y = int.from_bytes(data[32:], "big")
    try:
        return g1_from_affine(x, y)
    except ValueError as exc:
        raise InvalidEncoding(str(exc)) from exc


def _coord(c):
    return c if isinstance(c, int) else c.n


def encode_g2(point):
    affine = ec_normalize(point)
    if affine is None:
        return b"\x00" * G2_SIZE
    x, y = affine
    coords = list(x.coeffs) + list(y.coeffs)
    return b"".join(_coord(c).to_bytes(32, "big") for c in coords)


def decode_g2(data):
    if len(data) != G2_SIZE:
        raise InvalidEncoding(f"G2 점은 {G2_SIZE}바이트여야 합니다: {len(data)}")
    if data == b"\x00" * G2_SIZE:
        return Z2
    c = [int.from_bytes(data[i:i + 32], "big") for i in range(0, G2_SIZE, 32)]
    try:
        return g2_from_affine((c[0], c[1]), (c[2], c[3]))
    except ValueError as exc:
        raise InvalidEncoding(str(exc)) from exc


# ─────────────────────────────────────────────────────────────────────
# 공개 입력 / 증명 / wire record
# ─────────────────────────────────────────────────────────────────────

def encode_public_inputs(values):
    return _u32(len(values)) + b"".join(encode_fr(v) for v in values)


def decode_public_inputs(data):
    reader = Reader(data)
    values = [reader.fr() for _ in range(reader.u32())]
    reader.finish()
    return values


def encode_proof(proof):
    parts = [encode_g1(getattr(proof, name)) for name in PROOF_POINT_FIELDS]
    parts += [encode_fr(getattr(proof, name)) for name in PROOF_SCALAR_FIELDS]
    return b"".join(parts)


def decode_proof(data):
    reader = Reader(data)
    if len(reader.data) != PROOF_SIZE:
        raise InvalidEncoding(f"증명은 {PROOF_SIZE}바이트여야 합니다: {len(reader.data)}")
    proof = Proof()
    for name in PROOF_POINT_FIELDS:
        setattr(proof, name, reader.g1())
    for name in PROOF_SCALAR_FIELDS:
        setattr(proof, name, reader.fr())
    reader.finish()
    return proof


def encode_record(value, flag, proof_bytes):
    return encode_fr(value) + encode_flag(flag) + bytes(proof_bytes)


def decode_record(data):
    """wire record를 (값, 플래그, 증명 바이트)로 나눈다.

    Raises:
        InvalidEncoding: 33바이트보다 짧거나 값/플래그가 잘못됐을 때
    """
    if len(data) < RECORD_HEADER_SIZE:
        raise InvalidEncoding(
            f"wire record는 최소 {RECORD_HEADER_SIZE}바이트여야 합니다: {len(data)}"
        )
    data = bytes(data)
    value = decode_fr(data[:FR_SIZE])
    flag = decode_flag(data[FR_SIZE:RECORD_HEADER_SIZE])
    return value, flag, data[RECORD_HEADER_SIZE:]


# ─────────────────────────────────────────────────────────────────────
# 키
# ─────────────────────────────────────────────────────────────────────

def encode_key_header(kind, params, k, num_public_inputs, fingerprint):
    parts = [_text(kind), _u8(len(params))]
    for name, value in sorted(params.items()):
        parts.append(_text(name))
        parts.append(_u32(value))
    parts.append(_u8(k))
    parts.append(_u32(num_public_inputs))
    parts.append(bytes.fromhex(fingerprint))
    return b"".join(parts)


def read_key_header(reader):
    kind = reader.text()
    params = {}
    previous = None
    for _ in range(reader.u8()):
        name = reader.text()
        if previous is not None and name <= previous:
            raise InvalidEncoding("파라미터 이름이 정렬되어 있지 않습니다")
        previous = name
        params[name] = reader.u32()
    k = reader.u8()
    num_public_inputs = reader.u32()
    fingerprint = reader.take(32).hex()
    return {
        "kind": kind,
        "params": params,
        "k": k,
        "num_public_inputs": num_public_inputs,
        "fingerprint": fingerprint,
    }


def encode_verifying_key_fields(kind, params, k, fingerprint, preprocessed, srs_g2):
    parts = [encode_key_header(kind, params, k, preprocessed.num_public_inputs, fingerprint)]
    parts += [encode_g1(point) for _, point in preprocessed.commitments()]
    parts += [encode_g2(point) for point in srs_g2]
    return b"".join(parts)


def read_verifying_key_fields(reader):
    fields = read_key_header(reader)
    fields["commitments"] = [reader.g1() for _ in range(NUM_COMMITMENTS)]
    fields["srs_g2"] = [reader.g2(), reader.g2()]
    return fields


def encode_proving_key_tail(preprocessed, srs):
    parts = [_u32(len(srs.g1_powers))]
    parts += [encode_g1(point) for point in srs.g1_powers]
    for name in SELECTOR_NAMES:
        parts += [encode_fr(v) for v in preprocessed.selector_evals[name]]
    parts += [_u32(pos) for pos in preprocessed.sigma]
    return b"".join(parts)


def read_proving_key_tail(reader, n):
    count = reader.u32()
    if count == 0:
        raise InvalidEncoding("SRS가 비어 있습니다")
    g1_powers = [reader.g1() for _ in range(count)]
    selector_evals = {name: [reader.fr() for _ in range(n)] for name in SELECTOR_NAMES}
    sigma = [reader.u32() for _ in range(3 * n)]
    if sorted(sigma) != list(range(3 * n)):
        raise InvalidEncoding("σ가 순열이 아닙니다")
    return {"g1_powers": g1_powers, "selector_evals": selector_evals, "sigma": sigma}
