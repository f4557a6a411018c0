import math


def as_value(x):
    return x if isinstance(x, Value) else Value(x)


class Value:
    """A scalar node in the neuron's expression graph.

    Only the handful of ops the single-neuron example needs exist; each one
    records its inputs and a closure that pushes out.grad back into them.
    """

    def __init__(self, data, _children=(), _op='', label=''):
        self.data = data
        self.grad = 0.0
        self._prev = tuple(_children)
        self._op = _op
        self.label = label

        self._backward = lambda: None

    def __repr__(self):
        return f"Value(label={self.label!r}, data={self.data}, grad={self.grad})"

    def named(self, label):
        self.label = label
        return self

    def __add__(self, other):
        other = as_value(other)
        out = Value(self.data + other.data, (self, other), '+')

        def _backward():
            self.grad += out.grad
            other.grad += out.grad
        out._backward = _backward
        return out

    def __mul__(self, other):
        other = as_value(other)
        out = Value(self.data * other.data, (self, other), '*')

        def _backward():
            self.grad += other.data * out.grad
            other.grad += self.data * out.grad
        out._backward = _backward
        return out

    def __pow__(self, exponent):
        if not isinstance(exponent, (int, float)):
            raise TypeError(f"exponent must be a number, not {type(exponent).__name__}")
        out = Value(self.data ** exponent, (self,), f'**{exponent}')

        def _backward():
            self.grad += exponent * self.data ** (exponent - 1) * out.grad
        out._backward = _backward
        return out

    def sigmoid(self):
        s = 1 / (1 + math.exp(-self.data))
        out = Value(s, (self,), 'sigmoid')

        # local derivative is written in terms of the output: s * (1 - s)
        def _backward():
            self.grad += s * (1 - s) * out.grad
        out._backward = _backward
        return out

    def __neg__(self):
        return self * -1

    def __sub__(self, other):
        return self + (-as_value(other))

    def __rsub__(self, other):
        return as_value(other) - self

    __radd__ = __add__
    __rmul__ = __mul__

    def walk(self):
        """Every node under self, inputs before the nodes that use them."""
        order, seen = [], set()
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                order.append(node)
            elif node not in seen:
                seen.add(node)
                stack.append((node, True))
                stack.extend((child, False) for child in node._prev)
        return order

    def backward(self):
        order = self.walk()
        for node in order:
            node.grad = 0.0
        self.grad = 1.0
        for node in reversed(order):
            node._backward()


def trace(root):
    nodes = root.walk()
    edges = {(child, node) for node in nodes for child in node._prev}
    return set(nodes), edges


def get_graph_json(root):
    """Export the graph under root as plain nodes/edges dicts.

    Named nodes use their label as id so the output is stable between runs;
    anonymous intermediates (constants, partial sums) fall back to id().
    """
    nodes, edges = trace(root)

    def uid(v):
        return v.label or str(id(v))

    return {
        "nodes": [
            {
                "id": uid(n),
                "label": f"data: {n.data:.4f} | grad: {n.grad:.4f}",
                "op": n._op,
                "data": n.data,
                "grad": n.grad,
            }
            for n in sorted(nodes, key=lambda v: (not v.label, v.label))
        ],
        "edges": [{"source": uid(a), "target": uid(b)} for a, b in edges],
    }
