"""Symptom catalogue.

Every symptom log references one of these ids.  Names are the display labels
shown by clients; categories group the picker.
"""

from __future__ import annotations

from dataclasses import dataclass

SYMPTOM_CATEGORIES = (
    "mood",
    "pain",
    "body",
    "discharge",
    "energy",
    "lifestyle",
    "appetite",
    "intimacy",
    "tests",
    "pregnancy",
)


@dataclass(frozen=True)
class Symptom:
    symptom_id: str
    name: str
    category: str


# symptom_id → (display name, category)
_CATALOGUE: dict[str, tuple[str, str]] = {
    # mood
    "mood-happy": ("Happy", "mood"),
    "mood-sad": ("Sad", "mood"),
    "mood-irritable": ("Irritable", "mood"),
    "mood-anxious": ("Anxious", "mood"),
    "mood-tired": ("Tired", "mood"),
    "mood-energetic": ("Energetic", "mood"),
    "mood-emotional": ("Emotional", "mood"),
    "mood-stressed": ("Stressed", "mood"),
    "mood-calm": ("Calm", "mood"),
    "mood-confident": ("Confident", "mood"),

    # pain
    "pain-cramps": ("Cramps", "pain"),
    "pain-headache": ("Headache", "pain"),
    "pain-backache": ("Back Pain", "pain"),
    "pain-breast-tenderness": ("Breast Tenderness", "pain"),
    "pain-joint-pain": ("Joint Pain", "pain"),
    "pain-muscle-aches": ("Muscle Aches", "pain"),
    "pain-pelvic-pain": ("Pelvic Pain", "pain"),
    "pain-ovulation-pain": ("Ovulation Pain", "pain"),

    # body
    "body-bloating": ("Bloating", "body"),
    "body-acne": ("Acne", "body"),
    "body-nausea": ("Nausea", "body"),
    "body-dizziness": ("Dizziness", "body"),
    "body-hot-flashes": ("Hot Flashes", "body"),
    "body-cold-chills": ("Cold Chills", "body"),
    "body-constipation": ("Constipation", "body"),
    "body-diarrhea": ("Diarrhea", "body"),
    "body-weight-gain": ("Weight Gain", "body"),
    "body-swollen-breasts": ("Swollen Breasts", "body"),

    # discharge
    "discharge-clear": ("Clear Discharge", "discharge"),
    "discharge-white": ("White Discharge", "discharge"),
    "discharge-yellow": ("Yellow Discharge", "discharge"),
    "discharge-sticky": ("Sticky Discharge", "discharge"),
    "discharge-creamy": ("Creamy Discharge", "discharge"),
    "discharge-egg-white": ("Egg White Discharge", "discharge"),

    # energy
    "energy-high": ("High Energy", "energy"),
    "energy-low": ("Low Energy", "energy"),
    "sleep-insomnia": ("Insomnia", "energy"),
    "sleep-restless": ("Restless Sleep", "energy"),
    "sleep-vivid-dreams": ("Vivid Dreams", "energy"),
    "sleep-good-quality": ("Good Sleep", "energy"),

    # lifestyle
    "lifestyle-exercise-light": ("Light Exercise", "lifestyle"),
    "lifestyle-exercise-moderate": ("Moderate Exercise", "lifestyle"),
    "lifestyle-exercise-intense": ("Intense Exercise", "lifestyle"),
    "lifestyle-yoga": ("Yoga", "lifestyle"),
    "lifestyle-meditation": ("Meditation", "lifestyle"),
    "lifestyle-stress-high": ("High Stress", "lifestyle"),
    "lifestyle-stress-low": ("Low Stress", "lifestyle"),
    "lifestyle-alcohol": ("Alcohol", "lifestyle"),
    "lifestyle-caffeine": ("Caffeine", "lifestyle"),
    "lifestyle-water-low": ("Low Water Intake", "lifestyle"),
    "lifestyle-water-good": ("Good Hydration", "lifestyle"),

    # appetite
    "appetite-increased": ("Increased Appetite", "appetite"),
    "appetite-decreased": ("Decreased Appetite", "appetite"),
    "cravings-sweet": ("Sweet Cravings", "appetite"),
    "cravings-salty": ("Salty Cravings", "appetite"),
    "cravings-chocolate": ("Chocolate Cravings", "appetite"),
    "cravings-carbs": ("Carb Cravings", "appetite"),

    # intimacy
    "intimacy-high-libido": ("High Libido", "intimacy"),
    "intimacy-low-libido": ("Low Libido", "intimacy"),
    "intimacy-intercourse": ("Intercourse", "intimacy"),
    "intimacy-protected": ("Protected Intercourse", "intimacy"),
    "intimacy-orgasm": ("Orgasm", "intimacy"),

    # tests
    "test-ovulation": ("Ovulation Test", "tests"),
    "test-pregnancy": ("Pregnancy Test", "tests"),
    "medication-pain-relief": ("Pain Relief", "tests"),
    "medication-birth-control": ("Birth Control", "tests"),
    "medication-supplements": ("Supplements", "tests"),

    # pregnancy
    "pregnancy-morning-sickness": ("Morning Sickness", "pregnancy"),
    "pregnancy-fatigue": ("Pregnancy Fatigue", "pregnancy"),
    "pregnancy-heartburn": ("Heartburn", "pregnancy"),
    "pregnancy-back-pain": ("Pregnancy Back Pain", "pregnancy"),
    "pregnancy-swelling": ("Swelling", "pregnancy"),
    "pregnancy-braxton-hicks": ("Braxton Hicks", "pregnancy"),
    "pregnancy-mood-swings": ("Pregnancy Mood Swings", "pregnancy"),
    "pregnancy-frequent-urination": ("Frequent Urination", "pregnancy"),
    "pregnancy-constipation": ("Pregnancy Constipation", "pregnancy"),
    "pregnancy-leg-cramps": ("Leg Cramps", "pregnancy"),
    "pregnancy-shortness-breath": ("Shortness of Breath", "pregnancy"),
    "pregnancy-round-ligament-pain": ("Round Ligament Pain", "pregnancy"),
}

SYMPTOMS: dict[str, Symptom] = {
    symptom_id: Symptom(symptom_id=symptom_id, name=name, category=category)
    for symptom_id, (name, category) in _CATALOGUE.items()
}


def is_known_symptom(symptom_id: str) -> bool:
    return symptom_id in SYMPTOMS


def get_symptom(symptom_id: str) -> Symptom | None:
    return SYMPTOMS.get(symptom_id)


def symptoms_by_category(category: str) -> list[Symptom]:
    """Return catalogue entries for one category, in catalogue order."""
    return [s for s in SYMPTOMS.values() if s.category == category]
