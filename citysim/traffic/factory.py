"""
Vehicle factory.

Picks a body class by a fixed discrete distribution, a colour from the
class palette and an advertisement label, and returns a fresh visual
handle with no simulation state attached.
"""

from enum import Enum

import numpy as np

from .scene import VehicleHandle


class VehicleClass(Enum):
    """Vehicle body classes."""

    SEDAN = "sedan"
    SUV = "suv"
    BUS = "bus"
    TRUCK = "truck"
    VAN = "van"


# Spawn distribution in percent: sedan 30, SUV 30, bus 10, truck 15, van 15
CLASS_WEIGHTS: dict[VehicleClass, float] = {
    VehicleClass.SEDAN: 30.0,
    VehicleClass.SUV: 30.0,
    VehicleClass.BUS: 10.0,
    VehicleClass.TRUCK: 15.0,
    VehicleClass.VAN: 15.0,
}

CAR_COLORS = [
    "#ffffff",  # White
    "#1a1a1a",  # Black
    "#c0c0c0",  # Silver
    "#505050",  # Dark gray
    "#303030",  # Charcoal
    "#8b0000",  # Dark red
    "#1e3a5f",  # Navy blue
    "#2c4a1c",  # Dark green
    "#f5f5dc",  # Beige
    "#4a3728",  # Brown
    "#6b8e23",  # Olive
    "#87ceeb",  # Light blue
]

BUS_COLORS = [
    "#2e8b57",  # Sea green (city bus)
    "#1e3a5f",  # Navy (express bus)
    "#ff8c00",  # Orange
    "#8b0000",  # Dark red (tour bus)
]

TRUCK_COLORS = ["#ffffff", "#1e3a5f", "#505050", "#8b0000"]

VAN_COLORS = [
    "#ffffff",  # White
    "#ffcc00",  # Yellow (postal)
    "#4169e1",  # Royal blue
    "#228b22",  # Forest green
]

PALETTES: dict[VehicleClass, list[str]] = {
    VehicleClass.SEDAN: CAR_COLORS,
    VehicleClass.SUV: CAR_COLORS,
    VehicleClass.BUS: BUS_COLORS,
    VehicleClass.TRUCK: TRUCK_COLORS,
    VehicleClass.VAN: VAN_COLORS,
}

VEHICLE_LABELS = [
    # Solutions
    "Platform", "Reservation", "Font Cloud", "Marketing System",
    "Media Art", "IOT", "Shopping Mall", "Community",
    "CRM", "LMS", "ERP", "Web Agency",
    "EMS", "CMS", "Kiosk", "Cloud Service",
    "AI Lab", "Mobile App", "Windows App", "MacOS App",
    "3D Web", "Web MIDI",
    # Skills
    "Javascript", "Typescript", "PHP", "Go", "Python", "JAVA",
    "React", "Vue", "Svelte", "Hono", "Nest.js", "React Native",
    "Electron", "PostgreSQL", "MySQL", "MariaDB", "Cloudflare", "AWS",
]


class VehicleFactory:
    """
    Builds random vehicle handles.

    Uses its own random generator so that classification, colours and
    labels are reproducible when a seeded generator is supplied.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        class_weights: dict[VehicleClass, float] | None = None,
        labels: list[str] | None = None,
    ):
        """
        Initialize vehicle factory.

        Args:
            rng: Random generator (default: unseeded numpy generator)
            class_weights: Relative weight per vehicle class
                           (default: CLASS_WEIGHTS)
            labels: Advertisement labels handed out round-robin
                    (default: VEHICLE_LABELS)
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        weights = class_weights or CLASS_WEIGHTS
        if any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
            raise ValueError("Class weights must be non-negative with a positive sum")

        self._classes = list(weights)
        total = float(sum(weights.values()))
        self._probabilities = [weights[c] / total for c in self._classes]
        self.labels = list(labels) if labels is not None else list(VEHICLE_LABELS)
        self._label_index = 0

    @property
    def probabilities(self) -> dict[VehicleClass, float]:
        return dict(zip(self._classes, self._probabilities))

    def choose_class(self) -> VehicleClass:
        index = self.rng.choice(len(self._classes), p=self._probabilities)
        return self._classes[int(index)]

    def choose_color(self, vehicle_class: VehicleClass) -> str:
        palette = PALETTES[vehicle_class]
        return palette[int(self.rng.integers(len(palette)))]

    def next_label(self) -> str:
        if not self.labels:
            return ""
        label = self.labels[self._label_index]
        self._label_index = (self._label_index + 1) % len(self.labels)
        return label

    def create_random_vehicle(self) -> VehicleHandle:
        """Create a new, unattached vehicle handle."""
        vehicle_class = self.choose_class()
        return VehicleHandle(
            vehicle_class=vehicle_class.value,
            color=self.choose_color(vehicle_class),
            label=self.next_label(),
        )
