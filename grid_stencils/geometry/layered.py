"""
Layered stencils: several independent stencils read around the same cell.

    >>> hood = Layered(inner=moore(1), outer=annulus(3, 1))
    >>> sa = StencilArray(grid, hood, boundary=wrap())
    >>> s = sa.stencil_at((5, 5))
    >>> s.inner.neighbors, s.outer.neighbors

Layers share no offsets or state. The layered radius is the largest layer
radius, which is the halo width a StencilArray needs for all of them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from grid_stencils.geometry.kernel import Kernel
from grid_stencils.geometry.stencil import Stencil
from grid_stencils.utils.exceptions import ConstructionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    import numpy as np
    from numpy.typing import NDArray


class Layered:
    """
    Tuple or name-keyed collection of stencils used together.

    Accepted forms:
        Layered(moore(1), von_neumann(2))
        Layered(inner=moore(1), outer=moore(2))
        Layered((moore(1), von_neumann(2)))
        Layered({"inner": moore(1), "outer": moore(2)})

    neighbors, offsets and distances return one entry per layer, as a tuple
    or dict matching the way the layers were given.
    """

    __slots__ = ("_layers", "_center")

    def __init__(self, *layers: Any, **named_layers: Any):
        if layers and named_layers:
            raise ConstructionError("pass layers either positionally or by name, not both", component="Layered")
        if len(layers) == 1 and isinstance(layers[0], (tuple, list, Mapping)):
            layers = layers[0]
        collection = dict(named_layers) if named_layers else layers
        if isinstance(collection, Mapping):
            collection = dict(collection)
            members = list(collection.values())
        else:
            collection = tuple(collection)
            members = list(collection)

        if not members:
            raise ConstructionError("Layered needs at least one stencil", component="Layered")
        for member in members:
            if not isinstance(member, (Stencil, Kernel, Layered)):
                raise ConstructionError(
                    "layers must be stencils, kernels or Layered",
                    component="Layered",
                    diagnostic_data={"provided_type": type(member).__name__},
                )
        ndims = {member.ndims for member in members}
        if len(ndims) != 1:
            raise ConstructionError(
                "all layers must have the same dimensionality",
                component="Layered",
                diagnostic_data={"ndims": sorted(ndims)},
            )

        self._layers = collection
        self._center = None

    @property
    def layers(self) -> tuple | dict:
        return self._layers

    @property
    def is_named(self) -> bool:
        return isinstance(self._layers, dict)

    def _map(self, f: Callable[[Any], Any]) -> tuple | dict:
        if isinstance(self._layers, dict):
            return {key: f(layer) for key, layer in self._layers.items()}
        return tuple(f(layer) for layer in self._layers)

    def _members(self) -> list:
        if isinstance(self._layers, dict):
            return list(self._layers.values())
        return list(self._layers)

    @property
    def ndims(self) -> int:
        return self._members()[0].ndims

    @property
    def radius(self) -> int:
        return max(layer.radius for layer in self._members())

    @property
    def diameter(self) -> int:
        return 2 * self.radius + 1

    @property
    def offsets(self) -> tuple | dict:
        return self._map(lambda layer: layer.offsets)

    @property
    def distances(self) -> tuple | dict:
        return self._map(lambda layer: layer.distances)

    @property
    def neighbors(self) -> tuple | dict | None:
        """One neighbour group per layer, or None before positioning."""
        if all(layer.neighbors is None for layer in self._members()):
            return None
        return self._map(lambda layer: layer.neighbors)

    @property
    def center(self) -> Any:
        return self._center

    def rebuild(self, neighbors: tuple | dict, center: Any = None) -> Layered:
        """Rebuild every layer from one neighbour group per layer."""
        if isinstance(self._layers, dict):
            if not isinstance(neighbors, Mapping) or set(neighbors) != set(self._layers):
                raise ConstructionError("neighbour groups must use the layer names", component="Layered")
            rebuilt = {key: layer.rebuild(neighbors[key], center) for key, layer in self._layers.items()}
        else:
            if len(neighbors) != len(self._layers):
                raise ConstructionError("one neighbour group per layer is required", component="Layered")
            rebuilt = tuple(layer.rebuild(group, center) for layer, group in zip(self._layers, neighbors, strict=True))
        return self._replace(rebuilt, center)

    def positioned(self, fetch: Callable[[NDArray[np.intp]], NDArray], center: Any) -> Layered:
        return self._replace(self._map(lambda layer: layer.positioned(fetch, center)), center)

    def _replace(self, layers: tuple | dict, center: Any) -> Layered:
        new = object.__new__(Layered)
        new._layers = layers
        new._center = center
        return new

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator:
        return iter(self._members())

    def __getitem__(self, key: int | str) -> Any:
        return self._layers[key]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        layers = self._layers
        if isinstance(layers, dict) and name in layers:
            return layers[name]
        raise AttributeError(f"'Layered' object has no attribute {name!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Layered):
            return NotImplemented
        return self._layers == other._layers

    def __hash__(self) -> int:
        if isinstance(self._layers, dict):
            return hash(tuple(self._layers.items()))
        return hash(self._layers)

    def __repr__(self) -> str:
        return f"Layered({self._layers!r})"
