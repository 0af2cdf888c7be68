"""
게이트 표현식 (Expression)
============================

게이트는 "활성화된 행에서 0이어야 하는" 다항식 표현식의 리스트이다.

  Constant(c)              상수
  Query(column, rotation)  advice 열의 상대 행 (rotation) 값
  SelectorQuery(selector)  셀렉터 값 (0 또는 1)
  Sum(a, b), Product(a, b), Negated(a), Scaled(a, c)

파이썬 연산자 + - * 와 단항 - 로 조립한다. int와 FR은 Constant로 올린다.

  >>> s = meta.query_selector(q)
  >>> x = meta.query_advice(col, 0)
  >>> y = meta.query_advice(col, 1)
  >>> s * (y - x * x)

repr()은 정규 텍스트 형태이며 회로 지문(fingerprint)에 쓰인다.
"""

from zkcircuits.plonk.field import FR


def _lift(value):
    if isinstance(value, Expression):
        return value
    if isinstance(value, (int, FR)):
        return Constant(value)
    raise TypeError(f"표현식으로 변환할 수 없는 값: {value!r}")


class Expression:
    """표현식 트리 노드의 기반 클래스."""

    def __add__(self, other):
        return Sum(self, _lift(other))

    def __radd__(self, other):
        return Sum(_lift(other), self)

    def __sub__(self, other):
        return Sum(self, Negated(_lift(other)))

    def __rsub__(self, other):
        return Sum(_lift(other), Negated(self))

    def __mul__(self, other):
        if isinstance(other, (int, FR)):
            return Scaled(self, other)
        return Product(self, _lift(other))

    def __rmul__(self, other):
        if isinstance(other, (int, FR)):
            return Scaled(self, other)
        return Product(_lift(other), self)

    def __neg__(self):
        return Negated(self)

    def degree(self):
        raise NotImplementedError

    def evaluate(self, query_fn, selector_fn):
        """query_fn(column, rotation), selector_fn(selector) 로 값을 계산한다."""
        raise NotImplementedError

    def children(self):
        return ()

    def queries(self):
        """표현식에 등장하는 (column, rotation) 집합."""
        found = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Query):
                found.add((node.column, node.rotation))
            stack.extend(node.children())
        return found

    def selectors(self):
        found = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, SelectorQuery):
                found.add(node.selector)
            stack.extend(node.children())
        return found


class Constant(Expression):
    def __init__(self, value):
        self.value = value if isinstance(value, FR) else FR(value)

    def degree(self):
        return 0

    def evaluate(self, query_fn, selector_fn):
        return self.value

    def __repr__(self):
        return f"{int(self.value)}"


class Query(Expression):
    def __init__(self, column, rotation=0):
        self.column = column
        self.rotation = rotation

    def degree(self):
        return 1

    def evaluate(self, query_fn, selector_fn):
        return query_fn(self.column, self.rotation)

    def __repr__(self):
        return f"{self.column!r}@{self.rotation}"


class SelectorQuery(Expression):
    def __init__(self, selector):
        self.selector = selector

    def degree(self):
        return 1

    def evaluate(self, query_fn, selector_fn):
        return selector_fn(self.selector)

    def __repr__(self):
        return repr(self.selector)


class Sum(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def degree(self):
        return max(self.left.degree(), self.right.degree())

    def evaluate(self, query_fn, selector_fn):
        return (self.left.evaluate(query_fn, selector_fn)
                + self.right.evaluate(query_fn, selector_fn))

    def children(self):
        return (self.left, self.right)

    def __repr__(self):
        return f"({self.left!r} + {self.right!r})"


class Product(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def degree(self):
        return self.left.degree() + self.right.degree()

    def evaluate(self, query_fn, selector_fn):
        return (self.left.evaluate(query_fn, selector_fn)
                * self.right.evaluate(query_fn, selector_fn))

    def children(self):
        return (self.left, self.right)

    def __repr__(self):
        return f"({self.left!r} * {self.right!r})"


class Negated(Expression):
    def __init__(self, inner):
        self.inner = inner

    def degree(self):
        return self.inner.degree()

    def evaluate(self, query_fn, selector_fn):
        return FR(0) - self.inner.evaluate(query_fn, selector_fn)

    def children(self):
        return (self.inner,)

    def __repr__(self):
        return f"-{self.inner!r}"


class Scaled(Expression):
    def __init__(self, inner, factor):
        self.inner = inner
        self.factor = factor if isinstance(factor, FR) else FR(factor)

    def degree(self):
        return self.inner.degree()

    def evaluate(self, query_fn, selector_fn):
        return self.inner.evaluate(query_fn, selector_fn) * self.factor

    def children(self):
        return (self.inner,)

    def __repr__(self):
        return f"({self.inner!r} * {int(self.factor)})"
