"""Static guidance shown alongside the tracker.

Symptom explanations with home remedies, healthier swaps for cravings,
pregnancy nutrition tips and the disclaimers attached to generated answers.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.models.profile import Craving

SYMPTOM_TAGS: tuple[str, ...] = ("Cramps", "Headache", "Bloating", "Acne", "Tiredness")

SYMPTOM_DISCLAIMER = (
    "This is NOT a medical diagnosis. Please consult a doctor or healthcare "
    "professional for any health concerns."
)
PREGNANCY_DISCLAIMER = (
    "This is general information, not medical advice. Please consult your doctor "
    "for any personal health concerns."
)


@dataclass(frozen=True)
class SymptomInfo:
    reason: str
    remedies: tuple[str, ...]


@dataclass(frozen=True)
class NutritionTip:
    title: str
    content: str


SYMPTOM_INFO: dict[str, SymptomInfo] = {
    "Cramps": SymptomInfo(
        reason=(
            "During your period, your uterus contracts to shed its lining. "
            "These contractions can cause cramping."
        ),
        remedies=(
            "Try a heating pad or hot water bottle on your abdomen.",
            "Gentle exercise like walking or stretching can help.",
            "Sip on warm chamomile tea or ginger tea.",
            "Stay hydrated and avoid salty foods, which can cause bloating.",
        ),
    ),
    "Headache": SymptomInfo(
        reason=(
            "Hormone changes (especially the drop in estrogen) right before or during "
            "your period are a common trigger for headaches."
        ),
        remedies=(
            "Make sure you are drinking enough water.",
            "Rest in a quiet, dark room if possible.",
            "A cool cloth on your forehead can provide relief.",
            "Try to maintain a regular sleep schedule.",
        ),
    ),
    "Bloating": SymptomInfo(
        reason=(
            "Hormonal changes can cause your body to retain more water and salt, "
            "leading to that 'puffy' feeling."
        ),
        remedies=(
            "Drink plenty of water (it sounds counterintuitive, but it helps).",
            "Reduce your salt (sodium) intake.",
            "Eat potassium-rich foods like bananas or avocados.",
            "Avoid carbonated drinks and gas-producing foods.",
        ),
    ),
    "Acne": SymptomInfo(
        reason=(
            "Your hormones (like testosterone) can fluctuate, causing your skin's oil "
            "glands to work overtime, leading to breakouts."
        ),
        remedies=(
            "Be extra-gentle with your skincare routine; don't scrub.",
            "Use a gentle, non-comedogenic cleanser.",
            "Try to avoid touching your face.",
            "Change your pillowcase regularly.",
        ),
    ),
    "Tiredness": SymptomInfo(
        reason=(
            "Fluctuating hormones, trouble sleeping due to other symptoms (like cramps), "
            "and low iron levels can all contribute to fatigue."
        ),
        remedies=(
            "Aim for 7-9 hours of sleep.",
            "Eat iron-rich foods like leafy greens, beans, and lean meat.",
            "Try gentle exercise to boost your energy levels.",
            "Take short naps if you need to.",
        ),
    ),
}

CRAVING_SWAPS: dict[Craving, tuple[str, ...]] = {
    Craving.sweet: (
        "**Fruits:** A great source of natural sugars, fiber, and vitamins.",
        "**Dark Chocolate (70%+):** Contains magnesium, which can help with period symptoms.",
        "**Yogurt with Berries:** Provides protein and calcium, and the berries add natural sweetness.",
    ),
    Craving.sour: (
        "**Roasted Makhana (Fox Nuts):** A light, crunchy snack. Try with a sprinkle of amchur (dry mango powder).",
        "**Sprouts Chaat:** A nutrient-dense salad with moong sprouts, veggies, and a dash of lemon juice.",
    ),
    Craving.spicy: (
        "**Warm Vegetable Soup:** Hydrating, comforting, and packed with nutrients.",
        "**Moong Dal Chilla:** A savory pancake made from lentils, it's high in protein and easy to digest.",
    ),
}

NUTRITION_TIPS: tuple[NutritionTip, ...] = (
    NutritionTip(
        "Folic Acid is Key",
        "Take a prenatal vitamin with at least 400mcg of folic acid daily, especially "
        "in the first 12 weeks, to help prevent birth defects.",
    ),
    NutritionTip(
        "Eat Your Colors",
        "Fill your plate with colorful fruits and vegetables. They provide essential "
        "vitamins and minerals for you and your baby.",
    ),
    NutritionTip(
        "Lean Protein",
        "Include sources of lean protein like chicken, fish (low-mercury), beans, and "
        "lentils. Protein is crucial for your baby's growth.",
    ),
    NutritionTip(
        "Calcium for Bones",
        "Get plenty of calcium from dairy, fortified non-dairy milk, or dark leafy "
        "greens to support your baby's bone development.",
    ),
    NutritionTip(
        "Hydrate, Hydrate!",
        "Drink plenty of water (around 8-12 glasses a day). It helps form amniotic "
        "fluid and supports your increased blood volume.",
    ),
    NutritionTip(
        "Food Safety",
        "Avoid raw or undercooked meat, unpasteurized dairy, and high-mercury fish to "
        "prevent infections that can harm your baby.",
    ),
)


def symptom_info(tag: str) -> SymptomInfo | None:
    """Look up a symptom by tag, case-insensitively."""
    for name, info in SYMPTOM_INFO.items():
        if name.lower() == tag.strip().lower():
            return info
    return None


def canonical_symptom(tag: str) -> str | None:
    for name in SYMPTOM_INFO:
        if name.lower() == tag.strip().lower():
            return name
    return None
