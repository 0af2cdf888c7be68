"""
zkcircuits 예외 계층
======================

  CircuitError
   ├── ShapeError           회로 구조 선언 오류, 지문(fingerprint) 불일치
   ├── SynthesisError       witness가 제약을 만족하지 않음
   │    └── ConstraintViolation   할당 단계에서 바로 잡히는 위반
   ├── KeyGenError          키 생성 실패 (행 부족, 백엔드 오류)
   ├── ProveError           백엔드 증명 생성 실패
   └── InvalidEncoding      바이트 디코딩 실패 (ValueError 이기도 하다)

검증 실패는 예외가 아니다: verify()는 False를 반환한다.
"""


class CircuitError(Exception):
    """zkcircuits의 모든 예외의 기반 클래스."""


class ShapeError(CircuitError):
    pass


class SynthesisError(CircuitError):
    pass


class ConstraintViolation(SynthesisError):
    pass


class KeyGenError(CircuitError):
    pass


class ProveError(CircuitError):
    pass


class InvalidEncoding(CircuitError, ValueError):
    pass
