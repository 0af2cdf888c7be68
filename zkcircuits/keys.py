"""
키 관리 (KeyManager)
======================

  CircuitSpec.shape_only(**params)
        │  configure + synthesize (witness 없음)
        ▼
  Synthesis ──► 지문(fingerprint) ──► 같은 타입의 이전 지문과 비교
        │
        ▼  Arithmetization (vanilla PLONK 게이트 + 복사 제약)
  preprocess(circuit, SRS(k), n = 2^k)
        │
        ▼
  ProvingKey / VerifyingKey  ──► 메모리 캐시 + TinyDB KeyStore

**캐시**:
  - SRS: k별로 한 번 생성
  - 키: (회로 타입, 파라미터, k) 별로 메모리와 KeyStore에 저장
  - KeyStore 문서: {"type": 키 이름, "fingerprint", "proving_key", "verifying_key"}
    (키는 정규 바이트의 hex 문자열)
"""

import logging
import time

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from zkcircuits import serialization
from zkcircuits.circuits.base import CircuitKind
from zkcircuits.circuits.registry import spec_class
from zkcircuits.config import get_settings
from zkcircuits.errors import CircuitError, InvalidEncoding, KeyGenError, ShapeError
from zkcircuits.frontend.arithmetize import Arithmetization
from zkcircuits.plonk.preprocessor import PreprocessedData, SELECTOR_NAMES, SIGMA_NAMES, preprocess
from zkcircuits.plonk.srs import SRS, required_degree

logger = logging.getLogger(__name__)

MAX_K = 20

DATA = Query()


def _parse_kind(text):
    try:
        return CircuitKind.parse(text)
    except ShapeError as exc:
        raise InvalidEncoding(str(exc)) from exc


def _check_k(k):
    if not 1 <= k <= MAX_K:
        raise InvalidEncoding(f"k는 1..{MAX_K} 이어야 합니다: {k}")


def _set_commitments(preprocessed, commitments):
    for name, point in zip(SELECTOR_NAMES + SIGMA_NAMES, commitments):
        setattr(preprocessed, f"{name}_comm", point)


class VerifyingKey:
    """검증 키: 전처리 커밋먼트 + SRS G2 + 회로 정보."""

    def __init__(self, kind, params, k, fingerprint, preprocessed, srs_g2):
        self.kind = kind
        self.params = dict(params)
        self.k = k
        self.fingerprint = fingerprint
        self.preprocessed = preprocessed
        self.srs_g2 = srs_g2

    @property
    def n(self):
        return 1 << self.k

    @property
    def num_public_inputs(self):
        return self.preprocessed.num_public_inputs

    def to_bytes(self):
        return serialization.encode_verifying_key_fields(
            self.kind.value, self.params, self.k, self.fingerprint,
            self.preprocessed, self.srs_g2,
        )

    @classmethod
    def read(cls, reader):
        fields = serialization.read_verifying_key_fields(reader)
        _check_k(fields["k"])
        preprocessed = PreprocessedData(1 << fields["k"], fields["num_public_inputs"])
        _set_commitments(preprocessed, fields["commitments"])
        return cls(
            _parse_kind(fields["kind"]), fields["params"], fields["k"],
            fields["fingerprint"], preprocessed, fields["srs_g2"],
        )

    @classmethod
    def from_bytes(cls, data):
        """
        Raises:
            InvalidEncoding: 잘리거나 잘못된 바이트일 때
        """
        reader = serialization.Reader(data)
        vk = cls.read(reader)
        reader.finish()
        return vk


class ProvingKey:
    """증명 키: 검증 키 + 전처리 다항식 + 전체 SRS."""

    def __init__(self, kind, params, k, fingerprint, preprocessed, srs, spec_cls=None):
        self.kind = kind
        self.params = dict(params)
        self.k = k
        self.fingerprint = fingerprint
        self.preprocessed = preprocessed
        self.srs = srs
        self.spec_cls = spec_cls if spec_cls is not None else spec_class(kind)

    @property
    def n(self):
        return 1 << self.k

    @property
    def num_public_inputs(self):
        return self.preprocessed.num_public_inputs

    def verifying_key(self):
        return VerifyingKey(
            self.kind, self.params, self.k, self.fingerprint,
            self.preprocessed, self.srs.g2_powers,
        )

    def to_bytes(self):
        return (
            self.verifying_key().to_bytes()
            + serialization.encode_proving_key_tail(self.preprocessed, self.srs)
        )

    @classmethod
    def from_bytes(cls, data):
        """
        Raises:
            InvalidEncoding: 잘리거나 잘못된 바이트일 때
        """
        reader = serialization.Reader(data)
        vk = VerifyingKey.read(reader)
        tail = serialization.read_proving_key_tail(reader, vk.n)
        reader.finish()

        g1_powers = tail["g1_powers"]
        srs = SRS(g1_powers, vk.srs_g2, len(g1_powers) - 1)
        preprocessed = vk.preprocessed
        preprocessed.interpolate(tail["selector_evals"], tail["sigma"])
        return cls(vk.kind, vk.params, vk.k, vk.fingerprint, preprocessed, srs)


class KeyStore:
    """TinyDB 기반 키 저장소 (경로가 없으면 메모리)."""

    def __init__(self, path=None):
        if path is None:
            self.db = TinyDB(storage=MemoryStorage)
        else:
            self.db = TinyDB(path)
        self.table = self.db.table("keys")

    @staticmethod
    def key_name(kind, params, k):
        text = ",".join(f"{name}={value}" for name, value in sorted(params.items()))
        return f"{kind.value}({text}).k{k}"

    def save(self, pk):
        name = self.key_name(pk.kind, pk.params, pk.k)
        self.table.upsert({
            "type": name,
            "kind": pk.kind.value,
            "params": pk.params,
            "k": pk.k,
            "fingerprint": pk.fingerprint,
            "proving_key": pk.to_bytes().hex(),
            "verifying_key": pk.verifying_key().to_bytes().hex(),
        }, DATA.type == name)

    def load(self, kind, params, k):
        """저장된 (ProvingKey, VerifyingKey) 또는 None."""
        rows = self.table.search(DATA.type == self.key_name(kind, params, k))
        if not rows:
            return None
        row = rows[0]
        pk = ProvingKey.from_bytes(bytes.fromhex(row["proving_key"]))
        vk = VerifyingKey.from_bytes(bytes.fromhex(row["verifying_key"]))
        return pk, vk

    def remove(self, kind, params, k):
        self.table.remove(DATA.type == self.key_name(kind, params, k))

    def close(self):
        self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class KeyManager:
    def __init__(self, settings=None, store=None):
        self.settings = settings if settings is not None else get_settings()
        self._owns_store = store is None
        self.store = store if store is not None else KeyStore(self.settings.key_store_path)
        self._srs = {}
        self._keys = {}
        self._fingerprints = {}

    def close(self):
        """직접 연 KeyStore만 닫는다 (전달받은 저장소는 호출자 소유)."""
        if self._owns_store:
            self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def srs_for(self, k):
        if k not in self._srs:
            started = time.perf_counter()
            self._srs[k] = SRS.for_domain(1 << k, seed=self.settings.srs_seed)
            logger.info(
                "generated SRS for k=%d (degree %d) in %.2fs",
                k, required_degree(1 << k), time.perf_counter() - started,
            )
        return self._srs[k]

    def default_k(self, spec_cls):
        return self.settings.default_k.get(spec_cls.KIND.value, spec_cls.DEFAULT_K)

    def generate_keys(self, circuit, k=None, **params):
        """회로 타입의 (ProvingKey, VerifyingKey)를 만든다.

        Args:
            circuit: CircuitKind, 이름 문자열 또는 CircuitSpec 클래스
            k: 행 수 2^k (기본값은 회로의 DEFAULT_K)
            params: 타입 파라미터 (bits, depth)

        Raises:
            ShapeError: 같은 타입의 지문이 이전과 다를 때
            KeyGenError: 행이 부족하거나 백엔드가 실패할 때
        """
        spec_cls = spec_class(circuit)
        spec = spec_cls.shape_only(**params)
        if k is None:
            k = self.default_k(spec_cls)
        if not isinstance(k, int) or not 1 <= k <= MAX_K:
            raise KeyGenError(f"k는 1..{MAX_K} 사이의 정수여야 합니다: {k!r}")

        type_key = spec.type_key()
        cached = self._keys.get((type_key, k))
        if cached is not None and cached[0].spec_cls is spec_cls:
            return cached

        started = time.perf_counter()
        synthesis = spec.synthesis()
        fingerprint = synthesis.fingerprint()
        recorded = self._fingerprints.get(type_key)
        if recorded is not None and recorded != fingerprint:
            raise ShapeError(
                f"{spec.type_key_text()}의 회로 모양이 이전 키 생성 때와 다릅니다"
            )
        self._fingerprints[type_key] = fingerprint

        stored = self._load_stored(spec_cls, spec.params(), k, fingerprint)
        if stored is not None:
            self._keys[(type_key, k)] = stored
            return stored

        arithmetization = Arithmetization(synthesis.shape, synthesis.layout)
        n = 1 << k
        if arithmetization.num_rows > n:
            raise KeyGenError(
                f"{spec.type_key_text()}: 낮춘 회로가 {arithmetization.num_rows}행이라 "
                f"k={k} ({n}행)에 들어가지 않습니다"
            )

        srs = self.srs_for(k)
        try:
            preprocessed = preprocess(arithmetization.circuit(), srs, n)
        except (ValueError, ArithmeticError) as exc:
            raise KeyGenError(f"{spec.type_key_text()}: 전처리 실패: {exc}") from exc

        pk = ProvingKey(spec_cls.KIND, spec.params(), k, fingerprint, preprocessed, srs, spec_cls)
        vk = pk.verifying_key()
        self.store.save(pk)
        self._keys[(type_key, k)] = (pk, vk)
        logger.info(
            "generated keys for %s k=%d: %d rows, %d public inputs in %.2fs",
            spec.type_key_text(), k, arithmetization.num_rows,
            arithmetization.num_public_inputs, time.perf_counter() - started,
        )
        return pk, vk

    def _load_stored(self, spec_cls, params, k, fingerprint):
        try:
            stored = self.store.load(spec_cls.KIND, params, k)
        except CircuitError as exc:
            logger.warning("discarding unreadable stored key for %s: %s", spec_cls.KIND.value, exc)
            self.store.remove(spec_cls.KIND, params, k)
            return None
        if stored is None:
            return None
        pk, vk = stored
        if pk.fingerprint != fingerprint:
            logger.warning(
                "stored key for %s k=%d has a stale fingerprint, regenerating",
                spec_cls.KIND.value, k,
            )
            return None
        pk.spec_cls = spec_cls
        return pk, vk
