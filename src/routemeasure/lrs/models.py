"""Value types shared by the measure engine.

`Vertex` is an immutable (x, y[, z], m) tuple with elevation carried
explicitly as ``None`` when absent. `Polyline` is a multipart line: a list
of paths, each a list of vertices. `Feature` pairs a polyline with its
attribute mapping and is owned by the caller.
"""
import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Union


@dataclass(frozen=True)
class Vertex:
    x: float
    y: float
    m: Optional[float] = None
    z: Optional[float] = None

    @property
    def has_z(self) -> bool:
        return self.z is not None

    @property
    def has_m(self) -> bool:
        return self.m is not None

    def with_xy(self, x: float, y: float) -> 'Vertex':
        return replace(self, x=float(x), y=float(y))

    def with_m(self, m: Optional[float]) -> 'Vertex':
        return replace(self, m=m)


Path = List[Vertex]


@dataclass
class Polyline:
    """Multipart polyline with per-vertex measures.

    ``has_z``/``has_m`` describe the declared vertex layout (what the source
    said it sent) and travel with the geometry when it is encoded again.
    """
    paths: List[Path]
    has_z: bool = False
    has_m: bool = True
    spatial_reference: Optional[Dict[str, Any]] = None

    @property
    def vertex_count(self) -> int:
        return sum(len(p) for p in self.paths)

    def iter_vertices(self) -> Iterator[Vertex]:
        for path in self.paths:
            yield from path

    def copy(self) -> 'Polyline':
        return Polyline(
            paths=[list(p) for p in self.paths],
            has_z=self.has_z,
            has_m=self.has_m,
            spatial_reference=copy.deepcopy(self.spatial_reference),
        )


@dataclass(frozen=True)
class LineSegment:
    """Two consecutive vertices bracketing a measure."""
    start: Vertex
    end: Vertex

    @property
    def min_m(self) -> float:
        return min(self.start.m, self.end.m)

    @property
    def max_m(self) -> float:
        return max(self.start.m, self.end.m)


@dataclass(frozen=True)
class NearestPointResult:
    """Outcome of projecting a point onto a geometry.

    Either a located coordinate (``coordinate`` set) or the empty result
    returned for geometries without vertices. Build the empty variant with
    `NearestPointResult.empty()` and test it with ``is_empty``.
    """
    coordinate: Optional[Vertex]
    distance: float
    is_right_side: bool = False
    vertex_index: int = -1

    @classmethod
    def empty(cls) -> 'NearestPointResult':
        return cls(coordinate=None, distance=float('inf'), is_right_side=False, vertex_index=-1)

    @property
    def is_empty(self) -> bool:
        return self.coordinate is None


@dataclass(frozen=True)
class MeasureBoundary:
    """Smallest and largest measure of a set of features and where they sit."""
    min: float
    min_point: Vertex
    max: float
    max_point: Vertex


@dataclass
class RouteInfo:
    route_id: Union[str, int]
    route_name: Optional[str] = None
    previous_route_id: Optional[str] = None
    next_route_id: Optional[str] = None
    additional_field: Optional[Any] = None
    measure_info: Optional[MeasureBoundary] = None


@dataclass(frozen=True)
class StationInfo:
    """A resolved measure and the coordinate it falls on.

    ``station`` is the value the caller asked for; it is for display only and
    equals ``measure`` unless stations are computed from attributes.
    """
    measure: float
    point: Vertex
    station: Optional[float] = None
    route_info: Optional[RouteInfo] = None


@dataclass
class Feature:
    geometry: Optional[Polyline]
    attributes: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> 'Feature':
        return Feature(
            geometry=self.geometry.copy() if self.geometry is not None else None,
            attributes=copy.deepcopy(self.attributes),
        )
