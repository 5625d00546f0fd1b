"""
Proxy follower and modulation policies.

UNIT CONVENTIONS
----------------
Distances in METERS, speeds in 1/SECONDS (interpolation rate), volume in dB.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .base import check_range


@dataclass
class ProxyPolicy:
    """
    Policy for driving the reflected proxy along the solved path.

    ``proxy_waypoint_from_end`` counts back from the path end (the listener),
    so 1 selects the last interior waypoint, i.e. the last point the
    listener can see.

    JSON Schema:
    {
        "proxy_waypoint_from_end": int,
        "proxy_only_when_blocked": bool,
        "spring_arm_enabled": bool,
        "min_listener_distance": float (meters),
        "push_speed": float,
        "return_speed": float,
        "proxy_min_listener_distance": float (meters),
        "proxy_backoff_release_distance": float (meters),
        "proxy_backoff_path_distance": float (meters),
        "audio_proxy_lerp_speed": float,
        "audio_proxy_backoff_lerp_speed": float
    }
    """
    proxy_waypoint_from_end: int = 1
    proxy_only_when_blocked: bool = True
    spring_arm_enabled: bool = True
    min_listener_distance: float = 2.0
    push_speed: float = 8.0
    return_speed: float = 2.0
    proxy_min_listener_distance: float = 1.5
    proxy_backoff_release_distance: float = 2.5
    proxy_backoff_path_distance: float = 3.0
    audio_proxy_lerp_speed: float = 6.0
    audio_proxy_backoff_lerp_speed: float = 12.0

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "proxy_waypoint_from_end", self.proxy_waypoint_from_end, 0)
        check_range(errors, "min_listener_distance", self.min_listener_distance, 0.0)
        check_range(errors, "push_speed", self.push_speed, 0.0)
        check_range(errors, "return_speed", self.return_speed, 0.0)
        check_range(errors, "proxy_min_listener_distance", self.proxy_min_listener_distance, 0.0)
        check_range(errors, "proxy_backoff_path_distance", self.proxy_backoff_path_distance, 0.0)
        if self.proxy_backoff_release_distance < self.proxy_min_listener_distance:
            errors.append(
                "proxy_backoff_release_distance must be >= proxy_min_listener_distance "
                f"({self.proxy_backoff_release_distance} < {self.proxy_min_listener_distance})"
            )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proxy_waypoint_from_end": self.proxy_waypoint_from_end,
            "proxy_only_when_blocked": self.proxy_only_when_blocked,
            "spring_arm_enabled": self.spring_arm_enabled,
            "min_listener_distance": self.min_listener_distance,
            "push_speed": self.push_speed,
            "return_speed": self.return_speed,
            "proxy_min_listener_distance": self.proxy_min_listener_distance,
            "proxy_backoff_release_distance": self.proxy_backoff_release_distance,
            "proxy_backoff_path_distance": self.proxy_backoff_path_distance,
            "audio_proxy_lerp_speed": self.audio_proxy_lerp_speed,
            "audio_proxy_backoff_lerp_speed": self.audio_proxy_backoff_lerp_speed,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProxyPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class ModulationPolicy:
    """
    Policy for the derived audio modulation pushed to the proxy sink.

    JSON Schema:
    {
        "volume_loss_db_per_meter": float (dB/m),
        "max_volume_loss_db": float (dB),
        "occlusion_hold_seconds": float (seconds),
        "reflected_inner_radius": float (meters),
        "publish_debug_data": bool
    }
    """
    volume_loss_db_per_meter: float = 0.5
    max_volume_loss_db: float = 18.0
    occlusion_hold_seconds: float = 0.35
    reflected_inner_radius: float = 1.0
    publish_debug_data: bool = False

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "volume_loss_db_per_meter", self.volume_loss_db_per_meter, 0.0)
        check_range(errors, "max_volume_loss_db", self.max_volume_loss_db, 0.0)
        check_range(errors, "occlusion_hold_seconds", self.occlusion_hold_seconds, 0.0)
        check_range(errors, "reflected_inner_radius", self.reflected_inner_radius, 0.0)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volume_loss_db_per_meter": self.volume_loss_db_per_meter,
            "max_volume_loss_db": self.max_volume_loss_db,
            "occlusion_hold_seconds": self.occlusion_hold_seconds,
            "reflected_inner_radius": self.reflected_inner_radius,
            "publish_debug_data": self.publish_debug_data,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModulationPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


__all__ = [
    "ProxyPolicy",
    "ModulationPolicy",
]
