"""
Activity catalogue
Defines which care activities can be logged for each care recipient subtype,
and the characteristic flags a pet profile may carry.
Used by the care log module to validate new entries and by the recipients
module to validate subtypes.
"""

from typing import Dict, List

ACTIVITY_TYPES = [
    "WALK",
    "FEED",
    "MEDICATE",
    "BATHROOM",
    "ACCIDENT",
    "LITTER_BOX",
    "GROOMING",
    "VET_VISIT",
    "WELLNESS_CHECK",
    "CAGE_CLEAN",
    "TANK_CLEAN",
    "WATER_TEST",
    "EXERCISE",
    "HABITAT_CLEAN",
    "TEMPERATURE_CHECK",
    "WATER",
    "FERTILIZE",
    "PRUNE",
    "REPOT",
    "SUNLIGHT_ADJUST",
    "MEAL",
    "DOCTOR_VISIT",
    "APPOINTMENT",
    "ACTIVITY",
    "NOTE",
]

CATEGORIES = {
    "PET": ["DOG", "CAT", "BIRD", "FISH", "SMALL_MAMMAL", "REPTILE", "EXOTIC"],
    "PLANT": ["INDOOR", "OUTDOOR", "SUCCULENT"],
    "PERSON": ["ELDER", "CHILD", "ROOMMATE", "OTHER"],
}

ACTIONS_BY_SUBTYPE: Dict[str, List[str]] = {
    # Pets
    "DOG": ["WALK", "FEED", "MEDICATE", "BATHROOM", "ACCIDENT", "GROOMING", "VET_VISIT", "WELLNESS_CHECK", "NOTE"],
    "CAT": ["FEED", "MEDICATE", "LITTER_BOX", "ACCIDENT", "GROOMING", "VET_VISIT", "WELLNESS_CHECK", "NOTE"],
    "BIRD": ["FEED", "MEDICATE", "CAGE_CLEAN", "VET_VISIT", "NOTE"],
    "FISH": ["FEED", "TANK_CLEAN", "WATER_TEST", "NOTE"],
    "SMALL_MAMMAL": ["FEED", "MEDICATE", "CAGE_CLEAN", "EXERCISE", "VET_VISIT", "NOTE"],
    "REPTILE": ["FEED", "MEDICATE", "HABITAT_CLEAN", "TEMPERATURE_CHECK", "VET_VISIT", "NOTE"],
    "EXOTIC": ["FEED", "MEDICATE", "VET_VISIT", "NOTE"],
    # Plants
    "INDOOR": ["WATER", "FERTILIZE", "PRUNE", "REPOT", "SUNLIGHT_ADJUST", "NOTE"],
    "OUTDOOR": ["WATER", "FERTILIZE", "PRUNE", "NOTE"],
    "SUCCULENT": ["WATER", "FERTILIZE", "REPOT", "NOTE"],
    # People
    "ELDER": ["MEDICATE", "MEAL", "DOCTOR_VISIT", "WELLNESS_CHECK", "APPOINTMENT", "ACTIVITY", "NOTE"],
    "CHILD": ["MEAL", "MEDICATE", "DOCTOR_VISIT", "ACTIVITY", "NOTE"],
    "OTHER": ["MEDICATE", "MEAL", "DOCTOR_VISIT", "APPOINTMENT", "NOTE"],
}

PET_CHARACTERISTIC_IDS = [
    # Behaviour
    "AGGRESSIVE",
    "REACTIVE",
    "SHY",
    # Accessibility and health
    "MOBILITY_ISSUES",
    "BLIND",
    "DEAF",
]


def get_actions_for_subtype(subtype: str) -> List[str]:
    """Unknown subtypes fall back to NOTE only."""
    return ACTIONS_BY_SUBTYPE.get(subtype, ["NOTE"])


def is_valid_action_for_subtype(action: str, subtype: str) -> bool:
    return action in get_actions_for_subtype(subtype)


def is_valid_subtype(category: str, subtype: str) -> bool:
    return subtype in CATEGORIES.get(category, [])


def sanitize_characteristics(values) -> List[str]:
    """Keep known characteristic ids only, first occurrence wins."""
    if not isinstance(values, (list, tuple)):
        return []
    seen = []
    for value in values:
        if value in PET_CHARACTERISTIC_IDS and value not in seen:
            seen.append(value)
    return seen
