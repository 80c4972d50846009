"""Groom intensity: per-pet suggestion, daily intensity budget and booking length."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from ...models.domain import Appointment, GroomIntensity

INTENSITY_POINTS = {
    GroomIntensity.LIGHT: 1,
    GroomIntensity.MODERATE: 2,
    GroomIntensity.DEMANDING: 3,
    GroomIntensity.INTENSIVE: 4,
}
_ORDER = [GroomIntensity.LIGHT, GroomIntensity.MODERATE, GroomIntensity.DEMANDING, GroomIntensity.INTENSIVE]

_L, _M, _D, _I = _ORDER

# First match wins, so "doodle" sits before "poodle".
_BREED_PATTERNS: list[tuple[re.Pattern, GroomIntensity, str]] = [
    (re.compile(pattern, re.IGNORECASE), intensity, reason)
    for pattern, intensity, reason in (
        (r"malamute", _I, "large double coat"),
        (r"newfoundland|newf", _I, "giant heavy coat"),
        (r"saint\s*bernard|st\.\s*bernard", _I, "giant heavy coat"),
        (r"great\s*pyrenees", _I, "giant double coat"),
        (r"bernese", _I, "large double coat"),
        (r"tibetan\s*mastiff", _I, "giant heavy coat"),
        (r"komondor", _I, "corded coat requires special care"),
        (r"afghan\s*hound", _I, "long flowing coat"),
        (r"doodle|poo($|\s)|oodle", _D, "doodle coat requires extensive work"),
        (r"poodle", _D, "curly coat requires careful grooming"),
        (r"bichon", _D, "fluffy coat needs regular maintenance"),
        (r"husky", _D, "heavy double coat shedding"),
        (r"samoyed", _D, "thick white double coat"),
        (r"chow", _D, "dense double coat"),
        (r"akita", _D, "thick double coat"),
        (r"collie", _D, "long double coat"),
        (r"sheltie|shetland", _D, "long double coat"),
        (r"golden\s*retriever", _D, "long coat with feathering"),
        (r"cocker\s*spaniel", _D, "long coat prone to matting"),
        (r"springer\s*spaniel", _D, "long coat with feathering"),
        (r"cavalier", _D, "long silky coat"),
        (r"shih\s*tzu", _D, "long coat needs regular grooming"),
        (r"maltese", _D, "long white coat"),
        (r"yorkie|yorkshire", _D, "long silky coat"),
        (r"havanese", _D, "long silky coat"),
        (r"old\s*english\s*sheepdog", _D, "heavy shaggy coat"),
        (r"australian\s*shepherd|aussie", _D, "double coat with feathering"),
        (r"german\s*shepherd", _D, "double coat shedding"),
        (r"persian", _D, "long dense coat"),
        (r"maine\s*coon", _D, "large cat with long coat"),
        (r"ragdoll", _D, "semi-long silky coat"),
        (r"himalayan", _D, "long dense coat"),
        (r"norwegian\s*forest", _D, "long thick double coat"),
        (r"siberian", _D, "long triple coat"),
        (r"birman", _D, "semi-long silky coat"),
        (r"turkish\s*angora", _D, "long silky coat"),
        (r"british\s*longhair", _D, "dense long coat"),
        (r"balinese", _D, "long silky coat"),
        (r"somali", _D, "long ticked coat"),
        (r"turkish\s*van", _D, "semi-long water-resistant coat"),
        (r"nebelung", _D, "long blue double coat"),
        (r"laperm|selkirk\s*rex", _D, "curly coat needs careful handling"),
        (r"ragamuffin", _D, "long silky coat"),
        (r"labrador|lab($|\s)", _M, "short double coat"),
        (r"beagle", _M, "short easy-care coat"),
        (r"boxer", _M, "short smooth coat"),
        (r"pit\s*bull|pitbull|stafford", _M, "short smooth coat"),
        (r"rottweiler", _M, "short double coat"),
        (r"doberman|pointer|vizsla|weimaraner", _M, "short smooth coat"),
        (r"brittany", _M, "medium wavy coat"),
        (r"schnauzer|terrier", _M, "wiry coat"),
        (r"dachshund", _M, "short to medium coat"),
        (r"corgi", _M, "double coat, small size"),
        (r"pug", _M, "short coat, compact size"),
        (r"bulldog|boston|frenchie|french\s*bulldog", _M, "short smooth coat"),
        (r"shiba", _M, "double coat, small size"),
        (r"mix|mutt|mixed", _M, "mixed breed"),
        (r"exotic\s*shorthair|british\s*shorthair", _M, "dense plush coat"),
        (r"scottish\s*fold|manx", _M, "dense double coat"),
        (r"american\s*shorthair", _M, "dense working coat"),
        (r"chartreux", _M, "dense woolly coat"),
        (r"tonkinese", _M, "medium maintenance coat"),
        (r"snowshoe", _M, "medium coat"),
        (r"domestic\s*(medium|long)", _M, "medium to long coat"),
        (r"chihuahua", _L, "tiny with short coat"),
        (r"italian\s*greyhound", _L, "tiny with minimal coat"),
        (r"whippet|greyhound", _L, "short smooth coat"),
        (r"basenji", _L, "short coat, self-cleaning"),
        (r"min\s*pin|miniature\s*pinscher", _L, "tiny with short coat"),
        (r"hairless", _L, "minimal grooming needed"),
        (r"chinese\s*crested", _L, "minimal coat"),
        (r"siamese", _L, "short smooth coat"),
        (r"domestic\s*short", _L, "short easy coat"),
        (r"bengal|bombay", _L, "short sleek coat"),
        (r"abyssinian|singapura", _L, "short ticked coat"),
        (r"burmese", _L, "short satin coat"),
        (r"russian\s*blue", _L, "short dense coat, easy care"),
        (r"oriental", _L, "short smooth coat"),
        (r"cornish\s*rex|devon\s*rex", _L, "short wavy coat"),
        (r"sphynx", _L, "hairless, minimal grooming"),
        (r"korat", _L, "short single coat"),
        (r"ocicat|egyptian\s*mau", _L, "short spotted coat"),
        (r"havana\s*brown", _L, "short smooth coat"),
        (r"american\s*curl|japanese\s*bobtail", _L, "short to medium coat"),
    )
]

# Dog weight bands in lbs.
_SMALL_DOG = 20.0
_LARGE_DOG = 50.0
_GIANT_DOG = 80.0
_LARGE_CAT = 15.0

_DIFFICULT_BEHAVIOR = ("AGGRESSIVE", "BITE_RISK", "MUZZLE_REQUIRED")

BOOKING_MINUTES = {
    GroomIntensity.LIGHT: 45,
    GroomIntensity.MODERATE: 60,
    GroomIntensity.DEMANDING: 90,
    GroomIntensity.INTENSIVE: 120,
}

# Typical weight per size when the booking form only gives a size.
SIZE_WEIGHTS = {
    "dog": {"small": 15.0, "medium": 35.0, "large": 65.0, "giant": 100.0},
    "cat": {"small": 6.0, "medium": 10.0, "large": 15.0},
}
_FALLBACK_WEIGHT = 35.0


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(slots=True)
class IntensitySuggestion:
    intensity: GroomIntensity
    reasons: list[str] = field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    from_breed: bool = False
    from_weight: bool = False
    from_behavior: bool = False


def _bump(intensity: GroomIntensity) -> GroomIntensity:
    return _ORDER[min(_ORDER.index(intensity) + 1, len(_ORDER) - 1)]


def _lbs(weight: float) -> str:
    return f"{weight:g} lbs"


def suggest_intensity(
    breed: Optional[str] = None,
    weight: Optional[float] = None,
    species: Optional[str] = None,
    behavior_flags: Sequence[str] = (),
) -> IntensitySuggestion:
    """Suggest a groom intensity for the groomer to review.

    Breed sets the base level. Weight and difficult behaviour can only raise
    it, except that a small dog with no breed match drops to LIGHT.
    """
    result = IntensitySuggestion(intensity=GroomIntensity.MODERATE)

    if breed:
        for pattern, intensity, reason in _BREED_PATTERNS:
            if pattern.search(breed.strip()):
                result.intensity = intensity
                result.reasons.append(f"{breed}: {reason}")
                result.from_breed = True
                break

    if weight:
        if (species or "").lower() == "cat":
            if weight >= _LARGE_CAT and result.intensity is not GroomIntensity.INTENSIVE:
                result.intensity = _bump(result.intensity)
                result.reasons.append(f"Large cat ({_lbs(weight)})")
                result.from_weight = True
        elif weight >= _GIANT_DOG:
            if result.intensity in (GroomIntensity.LIGHT, GroomIntensity.MODERATE):
                result.intensity = GroomIntensity.DEMANDING
                result.reasons.append(f"Giant size ({_lbs(weight)})")
                result.from_weight = True
            elif result.intensity is GroomIntensity.DEMANDING:
                result.intensity = GroomIntensity.INTENSIVE
                result.reasons.append(f"Giant size ({_lbs(weight)})")
                result.from_weight = True
        elif weight >= _LARGE_DOG:
            if result.intensity is GroomIntensity.LIGHT:
                result.intensity = GroomIntensity.MODERATE
                result.reasons.append(f"Large size ({_lbs(weight)})")
                result.from_weight = True
        elif weight < _SMALL_DOG and not result.from_breed and result.intensity is GroomIntensity.MODERATE:
            result.intensity = GroomIntensity.LIGHT
            result.reasons.append(f"Small size ({_lbs(weight)})")
            result.from_weight = True

    difficult = [flag for flag in behavior_flags if flag in _DIFFICULT_BEHAVIOR]
    if difficult:
        if result.intensity is not GroomIntensity.INTENSIVE:
            result.intensity = _bump(result.intensity)
            names = ", ".join(flag.replace("_", " ").lower() for flag in difficult)
            result.reasons.append(f"Behavior: {names}")
            result.from_behavior = True
    elif "ANXIOUS" in behavior_flags and result.intensity is GroomIntensity.LIGHT:
        result.intensity = GroomIntensity.MODERATE
        result.reasons.append("Anxious behavior needs extra patience")
        result.from_behavior = True

    if result.from_breed and (result.from_weight or not weight):
        result.confidence = Confidence.HIGH
    elif result.from_breed or (result.from_weight and weight and weight >= _LARGE_DOG):
        result.confidence = Confidence.MEDIUM

    if not result.reasons:
        result.reasons.append("Default for unknown breed/size")
    return result


def pet_intensity(appointment: Appointment) -> GroomIntensity:
    pet = appointment.pet
    if pet and pet.groom_intensity:
        return pet.groom_intensity
    return GroomIntensity.MODERATE


def calculate_total_intensity(appointments: Iterable[Appointment]) -> int:
    return sum(INTENSITY_POINTS[pet_intensity(a)] for a in appointments)


@dataclass(slots=True)
class IntensityCheck:
    allowed: bool
    current_total: int
    would_be_total: int
    limit: Optional[int]
    remaining: Optional[int]
    over_by: int


def check_intensity_limit(
    appointments: Iterable[Appointment], new_intensity: GroomIntensity, daily_limit: Optional[int]
) -> IntensityCheck:
    """Whether one more pet of ``new_intensity`` fits the daily budget; None means no limit."""
    current = calculate_total_intensity(appointments)
    would_be = current + INTENSITY_POINTS[new_intensity]
    if daily_limit is None:
        return IntensityCheck(True, current, would_be, None, None, 0)
    allowed = would_be <= daily_limit
    return IntensityCheck(
        allowed=allowed,
        current_total=current,
        would_be_total=would_be,
        limit=daily_limit,
        remaining=max(0, daily_limit - current),
        over_by=0 if allowed else would_be - daily_limit,
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def intensity_percentage(total: int, daily_limit: Optional[int]) -> int:
    if not daily_limit:
        return 0
    return min(100, _round_half_up(total / daily_limit * 100))


# (max percent of the limit, level, message)
_INTENSITY_BANDS = (
    (50.0, "light", "Light day - plenty of capacity"),
    (75.0, "moderate", "Balanced day"),
    (90.0, "busy", "Busy day - approaching your limit"),
    (100.0, "heavy", "At capacity"),
)


def intensity_status(total: int, daily_limit: Optional[int]) -> tuple[str, str]:
    if daily_limit is None:
        return "moderate", "No daily limit set"
    if total == 0:
        return "light", "No appointments scheduled"
    percentage = total / daily_limit * 100 if daily_limit else math.inf
    for ceiling, level, message in _INTENSITY_BANDS:
        if percentage <= ceiling:
            return level, message
    return "overloaded", "Over your daily limit"


@dataclass(slots=True)
class DurationEstimate:
    minutes: int
    intensity: GroomIntensity
    reasons: list[str]
    confidence: Confidence


def estimate_duration(species: str, breed: str, size: str) -> DurationEstimate:
    """Booking length for a public request from species, breed and size."""
    weights = SIZE_WEIGHTS.get(species, SIZE_WEIGHTS["dog"])
    weight = weights.get(size, _FALLBACK_WEIGHT)
    suggestion = suggest_intensity(breed=breed, weight=weight, species=species)
    return DurationEstimate(
        minutes=BOOKING_MINUTES[suggestion.intensity],
        intensity=suggestion.intensity,
        reasons=suggestion.reasons,
        confidence=suggestion.confidence,
    )


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return "1 hour" if hours == 1 else f"{hours} hours"
    return f"{hours}h {rest}m"
