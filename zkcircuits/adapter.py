"""
CircuitAdapter: CircuitKind 로 닫힌 회로 집합을 다루는 단일 진입점.

사용 예시:
    >>> adapter = CircuitAdapter()
    >>> pk, vk = adapter.generate_keys("square")
    >>> proof = adapter.prove(pk, SquareWitness(x=5))
    >>> adapter.verify(vk, [25], proof)     # True
"""

from zkcircuits.circuits.registry import circuit_info, list_circuits, spec_class
from zkcircuits.keys import KeyManager
from zkcircuits.pipeline import ProofPipeline


class CircuitAdapter:
    def __init__(self, key_manager=None, pipeline=None):
        self._owns_key_manager = key_manager is None
        self.key_manager = key_manager if key_manager is not None else KeyManager()
        self.pipeline = pipeline if pipeline is not None else ProofPipeline()

    def close(self):
        if self._owns_key_manager:
            self.key_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def list_circuits(self):
        return list_circuits()

    def circuit_info(self, kind):
        return circuit_info(kind)

    def shape(self, kind, **params):
        return spec_class(kind).shape(**params)

    def generate_keys(self, kind, k=None, **params):
        return self.key_manager.generate_keys(kind, k, **params)

    def prove(self, pk, witness, public_inputs=None):
        return self.pipeline.prove(pk, witness, public_inputs)

    def verify(self, vk, public_inputs, proof_bytes):
        return self.pipeline.verify(vk, public_inputs, proof_bytes)

    def prove_record(self, pk, witness):
        return self.pipeline.prove_record(pk, witness)

    def verify_record(self, vk, record, extra_public_inputs=()):
        return self.pipeline.verify_record(vk, record, extra_public_inputs)
