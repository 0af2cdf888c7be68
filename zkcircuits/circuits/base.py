"""
CircuitSpec: 회로 변형(variant)의 공통 틀
===========================================

  configure(builder)         → config     (witness와 무관, 타입 파라미터에만 의존)
  synthesize(config, layouter)             (witness 값 배치, 없으면 unknown)

  shape_only(**params)       키 생성용 인스턴스 (witness 없음)
  with_witness(w, **params)  증명용 인스턴스

두 생성자는 같은 configure/synthesize 경로를 탄다. 지문(fingerprint)은
모양 + 레이아웃 구조의 해시이며, 키 생성 때와 증명 때가 같아야 한다.
"""

import enum
import hashlib
import logging
from dataclasses import fields

from zkcircuits.errors import ShapeError, SynthesisError
from zkcircuits.frontend.constraint_system import ConstraintSystemBuilder
from zkcircuits.frontend.layouter import Layouter, Value

logger = logging.getLogger(__name__)


class CircuitKind(enum.Enum):
    SQUARE = "square"
    RANGE_MEMBERSHIP = "range_membership"
    AGE_RANGE = "age_range"
    BALANCE_SUFFICIENCY = "balance_sufficiency"
    MERKLE_MEMBERSHIP = "merkle_membership"
    VOTE_CAST = "vote_cast"

    @classmethod
    def parse(cls, name):
        """값("age_range") 또는 이름("AGE_RANGE")을 받는다.

        Raises:
            ShapeError: 알 수 없는 회로 종류일 때
        """
        if isinstance(name, cls):
            return name
        text = str(name).strip()
        for kind in cls:
            if text == kind.value or text.upper() == kind.name:
                return kind
        raise ShapeError(f"알 수 없는 회로 종류: {name!r}")


class Synthesis:
    """한 번의 configure + synthesize 결과."""

    def __init__(self, spec, shape, layout):
        self.spec = spec
        self.shape = shape
        self.layout = layout

    def fingerprint(self):
        text = "\n".join([
            self.spec.type_key_text(),
            self.shape.fingerprint(),
            self.layout.fingerprint(),
        ])
        return hashlib.sha256(text.encode()).hexdigest()

    def public_inputs(self):
        return self.layout.bound_public_inputs()


class CircuitSpec:
    KIND = None
    DEFAULT_K = None
    WITNESS = None
    PARAMS = {}

    def __init__(self, witness=None, **params):
        if witness is not None and not isinstance(witness, self.WITNESS):
            raise SynthesisError(
                f"{type(self).__name__}의 witness는 {self.WITNESS.__name__} 이어야 합니다: "
                f"{type(witness).__name__}"
            )
        self.witness = witness
        self._params = self.resolve_params(params)

    @classmethod
    def shape_only(cls, **params):
        return cls(None, **params)

    @classmethod
    def with_witness(cls, witness, **params):
        return cls(witness, **params)

    @classmethod
    def resolve_params(cls, params):
        """
        Raises:
            ShapeError: 알 수 없는 파라미터이거나 값이 유효하지 않을 때
        """
        unknown = set(params) - set(cls.PARAMS)
        if unknown:
            raise ShapeError(f"{cls.__name__}: 알 수 없는 파라미터 {sorted(unknown)}")
        resolved = dict(cls.PARAMS)
        resolved.update(params)
        for name, value in resolved.items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ShapeError(f"{cls.__name__}: 파라미터 {name}={value!r} 는 양의 정수여야 합니다")
        return resolved

    def params(self):
        return dict(self._params)

    def type_key(self):
        return (self.KIND.value, tuple(sorted(self._params.items())))

    def type_key_text(self):
        kind, params = self.type_key()
        return kind + "(" + ",".join(f"{k}={v}" for k, v in params) + ")"

    def has_witness(self):
        return self.witness is not None

    def value(self, name):
        """witness 필드를 Value로 (witness가 없으면 unknown)."""
        if self.witness is None:
            return Value.unknown()
        return Value.known(getattr(self.witness, name))

    def values(self, name, length):
        """witness의 리스트 필드를 Value 리스트로 (witness가 없으면 unknown)."""
        if self.witness is None:
            return [Value.unknown() for _ in range(length)]
        return [Value.known(v) for v in getattr(self.witness, name)]

    def configure(self, builder):
        raise NotImplementedError

    def synthesize(self, config, layouter):
        raise NotImplementedError

    def expected_public_inputs(self):
        """witness에서 네이티브로 계산한 공개 입력 벡터."""
        raise NotImplementedError

    def synthesis(self):
        builder = ConstraintSystemBuilder()
        config = self.configure(builder)
        shape = builder.build()
        layouter = Layouter(shape)
        self.synthesize(config, layouter)
        logger.debug(
            "synthesized %s: %d regions, %d rows",
            self.type_key_text(), len(layouter.layout.regions), layouter.layout.num_rows,
        )
        return Synthesis(self, shape, layouter.layout)

    @classmethod
    def shape(cls, **params):
        """키 생성과 같은 경로 (witness 없음) 로 만든 CircuitShape."""
        return cls.shape_only(**params).synthesis().shape

    @classmethod
    def witness_fields(cls):
        return [f.name for f in fields(cls.WITNESS)]
