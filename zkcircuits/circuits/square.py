"""
Square 회로: 비밀 x에 대해 y = x² 를 공개한다.

  offset │ x   │ q_square          instance
  ───────┼─────┼─────────          ────────
     0   │  x  │    1               y
     1   │  y  │

  square:  q_square · (x(1) - x(0)²) = 0,   x(1) ↔ instance[0]
"""

from dataclasses import dataclass

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.plonk.field import FR


@dataclass
class SquareWitness:
    x: int


@dataclass(frozen=True)
class SquareConfig:
    x: object
    instance: object
    q_square: object


class SquareCircuit(CircuitSpec):
    KIND = CircuitKind.SQUARE
    DEFAULT_K = 3
    WITNESS = SquareWitness

    def configure(self, builder):
        x = builder.advice_column()
        instance = builder.instance_column()
        builder.enable_equality(x)
        builder.enable_equality(instance)
        q_square = builder.selector()

        def square_gate(meta):
            cur = meta.query_advice(x, 0)
            nxt = meta.query_advice(x, 1)
            return [meta.query_selector(q_square) * (nxt - cur * cur)]

        builder.create_gate("square", square_gate)
        return SquareConfig(x, instance, q_square)

    def synthesize(self, config, layouter):
        x_value = self.value("x")

        def body(region):
            region.enable_selector(config.q_square, 0)
            region.assign_advice("x", config.x, 0, x_value)
            return region.assign_advice("y", config.x, 1, x_value * x_value)

        y = layouter.assign_region("square", body)
        layouter.constrain_instance(y, config.instance, 0)

    def expected_public_inputs(self):
        x = FR(self.witness.x)
        return [x * x]
