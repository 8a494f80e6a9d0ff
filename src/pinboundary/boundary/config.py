from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

SimplicityFallback = Literal["convex_hull", "none"]


@dataclass(frozen=True)
class BoundaryConfig:
    """Tuning constants for boundary generation."""

    ray_count: int = 180
    jitter_min: float = 0.85
    jitter_max: float = 1.15
    default_radius_m: float = 1000.0
    min_radius_m: float = 500.0
    max_radius_m: float = 3000.0
    snap_batch_size: int = 90
    snap_batch_delay_s: float = 0.1
    min_snapped_points: int = 20
    smoothing_iterations: int = 3
    simplicity_fallback: SimplicityFallback = "convex_hull"
    country: str = "IN"

    def __post_init__(self) -> None:
        if self.ray_count < 3:
            raise ValueError("ray_count must be >= 3")
        if not 0 < self.jitter_min <= self.jitter_max:
            raise ValueError("jitter bounds must satisfy 0 < jitter_min <= jitter_max")
        if not 0 < self.min_radius_m <= self.max_radius_m:
            raise ValueError("radius bounds must satisfy 0 < min_radius_m <= max_radius_m")
        if self.snap_batch_size <= 0:
            raise ValueError("snap_batch_size must be > 0")
        if self.smoothing_iterations < 0:
            raise ValueError("smoothing_iterations must be >= 0")
        if self.simplicity_fallback not in ("convex_hull", "none"):
            raise ValueError(f"Unknown simplicity_fallback: {self.simplicity_fallback}")

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "BoundaryConfig":
        b = settings.get("boundary", {}) or {}
        g = settings.get("google", {}) or {}
        return cls(
            ray_count=int(b.get("ray_count", 180)),
            jitter_min=float(b.get("jitter_min", 0.85)),
            jitter_max=float(b.get("jitter_max", 1.15)),
            default_radius_m=float(b.get("default_radius_m", 1000.0)),
            min_radius_m=float(b.get("min_radius_m", 500.0)),
            max_radius_m=float(b.get("max_radius_m", 3000.0)),
            snap_batch_size=int(b.get("snap_batch_size", 90)),
            snap_batch_delay_s=float(b.get("snap_batch_delay_s", 0.1)),
            min_snapped_points=int(b.get("min_snapped_points", 20)),
            smoothing_iterations=int(b.get("smoothing_iterations", 3)),
            simplicity_fallback=str(b.get("simplicity_fallback", "convex_hull")),  # type: ignore[arg-type]
            country=str(g.get("country", "IN")),
        )
