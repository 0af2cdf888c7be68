"""
Merkle 경로 칩 (Poseidon 커밋먼트 위에 구성)
==============================================

레벨마다 인덱스 비트가 (cur, sibling) 순서를 고른 뒤 해싱한다.

  offset │ cur │ sib │ bit │ left │ right │ q_swap
  ───────┼─────┼─────┼─────┼──────┼───────┼───────
     0   │  c  │  s  │  β  │  l   │  r    │   1

  bit · (1 - bit) = 0
  l = c + bit·(s - c)         (bit = 0 → l = c)
  r = s + bit·(c - s)         (bit = 0 → r = s)

  next = H(l, r).  마지막 레벨의 결과가 루트이다.

네이티브 merkle_root / build_merkle_tree / merkle_path 는 회로와 같은 값을 낸다.
"""

from dataclasses import dataclass

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.constraint_system import Column, Selector
from zkcircuits.frontend.layouter import Value
from zkcircuits.gadgets.poseidon import PoseidonChip, poseidon_hash
from zkcircuits.plonk.field import FR


# ─────────────────────────────────────────────────────────────────────
# 네이티브 구현
# ─────────────────────────────────────────────────────────────────────

def hash_pair(left, right):
    return poseidon_hash([left, right])


def merkle_root(leaf, path_elements, path_indices):
    """
    Raises:
        ValueError: 경로 길이가 다르거나 인덱스가 0/1이 아닐 때
    """
    if len(path_elements) != len(path_indices):
        raise ValueError("path_elements와 path_indices의 길이가 다릅니다")
    current = FR(leaf)
    for sibling, index in zip(path_elements, path_indices):
        if int(index) not in (0, 1):
            raise ValueError(f"경로 인덱스는 0 또는 1이어야 합니다: {index}")
        if int(index) == 0:
            current = hash_pair(current, sibling)
        else:
            current = hash_pair(sibling, current)
    return current


def build_merkle_tree(leaves, depth):
    """깊이 depth의 트리를 만든다 (빈 잎은 0).

    Returns:
        (root, levels): levels[0]은 잎, levels[depth]는 [root]

    Raises:
        ValueError: 잎이 2^depth 개를 넘을 때
    """
    size = 1 << depth
    if len(leaves) > size:
        raise ValueError(f"잎 {len(leaves)}개는 깊이 {depth} 트리에 들어가지 않습니다")
    level = [FR(leaf) for leaf in leaves] + [FR(0)] * (size - len(leaves))
    levels = [level]
    for _ in range(depth):
        level = [hash_pair(level[i], level[i + 1]) for i in range(0, len(level), 2)]
        levels.append(level)
    return level[0], levels


def merkle_path(levels, index):
    """잎 index의 (path_elements, path_indices)."""
    elements = []
    indices = []
    for level in levels[:-1]:
        bit = index & 1
        elements.append(level[index ^ 1])
        indices.append(bit)
        index >>= 1
    return elements, indices


# ─────────────────────────────────────────────────────────────────────
# 회로 칩
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MerklePathConfig:
    cur: Column
    sib: Column
    bit: Column
    left: Column
    right: Column
    q_swap: Selector


class MerklePathChip:
    def __init__(self, config, poseidon):
        self.config = config
        self.poseidon = poseidon

    @staticmethod
    def configure(builder):
        cur = builder.advice_column()
        sib = builder.advice_column()
        bit = builder.advice_column()
        left = builder.advice_column()
        right = builder.advice_column()
        for column in (cur, left, right):
            builder.enable_equality(column)
        q_swap = builder.selector()

        def swap_gate(meta):
            q = meta.query_selector(q_swap)
            c = meta.query_advice(cur, 0)
            s = meta.query_advice(sib, 0)
            b = meta.query_advice(bit, 0)
            l = meta.query_advice(left, 0)
            r = meta.query_advice(right, 0)
            return [
                q * b * (1 - b),
                q * (l - c - b * (s - c)),
                q * (r - s - b * (c - s)),
            ]

        builder.create_gate("merkle swap", swap_gate)
        return MerklePathConfig(cur, sib, bit, left, right, q_swap)

    @classmethod
    def construct(cls, config, poseidon_config):
        return cls(config, PoseidonChip(poseidon_config))

    def _level(self, layouter, current, sibling, index):
        config = self.config

        def body(region):
            cur = region.copy_advice("cur", current, config.cur, 0)
            region.assign_advice("sibling", config.sib, 0, sibling)
            region.assign_advice("index", config.bit, 0, index)
            region.enable_selector(config.q_swap, 0)
            left_value = cur.value + index * (sibling - cur.value)
            right_value = sibling + index * (cur.value - sibling)
            left = region.assign_advice("left", config.left, 0, left_value)
            right = region.assign_advice("right", config.right, 0, right_value)
            return left, right

        left, right = layouter.assign_region("merkle level", body)
        return self.poseidon.hash(layouter, [left, right])

    def root(self, layouter, leaf, path_elements, path_indices):
        """잎 셀에서 루트 셀을 계산한다.

        Args:
            leaf: 잎 AssignedCell
            path_elements, path_indices: 레벨별 Value 리스트

        Raises:
            ConstraintViolation: 두 리스트의 길이가 다를 때
        """
        if len(path_elements) != len(path_indices):
            raise ConstraintViolation("path_elements와 path_indices의 길이가 다릅니다")
        current = leaf
        for sibling, index in zip(path_elements, path_indices):
            sibling = sibling if isinstance(sibling, Value) else Value.known(sibling)
            index = index if isinstance(index, Value) else Value.known(index)
            current = self._level(layouter, current, sibling, index)
        return current
