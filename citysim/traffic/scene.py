"""
Scene-graph side of the simulator.

Vehicle meshes are built by the renderer; the simulator only sees a
handle it can place in the world and detach again. `Scene` tracks which
handles are currently attached so leaks show up as a count mismatch.
"""

from dataclasses import dataclass


@dataclass(eq=False)
class VehicleHandle:
    """Opaque visual node of one vehicle."""

    vehicle_class: str
    color: str
    label: str
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0
    attached: bool = False
    released: bool = False

    def set_transform(self, x: float, y: float, z: float, yaw: float) -> None:
        """Write world position and heading."""
        self.x = x
        self.y = y
        self.z = z
        self.yaw = yaw

    @property
    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Scene:
    """Minimal scene graph holding the vehicle handles currently in the world."""

    def __init__(self):
        self._nodes: list[VehicleHandle] = []

    def add(self, handle: VehicleHandle) -> None:
        if handle.attached:
            raise ValueError("Handle is already attached to a scene")
        handle.attached = True
        self._nodes.append(handle)

    def remove(self, handle: VehicleHandle) -> None:
        """Detach a handle and release it; releasing twice is an error."""
        if not handle.attached:
            raise ValueError("Handle is not attached to this scene")
        self._nodes.remove(handle)
        handle.attached = False
        handle.released = True

    def clear(self) -> None:
        for handle in list(self._nodes):
            self.remove(handle)

    @property
    def nodes(self) -> tuple[VehicleHandle, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, handle: VehicleHandle) -> bool:
        return handle in self._nodes
