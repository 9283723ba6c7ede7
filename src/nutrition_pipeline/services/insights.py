"""Prose insights for analyzed foods."""

from dataclasses import dataclass
from typing import Protocol

from nutrition_pipeline.domain.analysis import FoodInsight
from nutrition_pipeline.domain.glycemic import GIResult
from nutrition_pipeline.domain.grading import Grade, GradingResult, WellnessFocus
from nutrition_pipeline.domain.nutrition import NutritionRecord

MAX_TIPS = 3
MAX_CONSIDERATIONS = 2

FOCUS_DISPLAY_NAMES: dict[WellnessFocus, str] = {
    WellnessFocus.BALANCED: "balanced nutrition",
    WellnessFocus.MUSCLE_BUILDING: "muscle building",
    WellnessFocus.HEART_HEALTH: "heart health",
    WellnessFocus.ENERGY_ENDURANCE: "energy and endurance",
    WellnessFocus.WEIGHT_MANAGEMENT: "weight management",
    WellnessFocus.BRAIN_FOCUS: "brain function and focus",
    WellnessFocus.GUT_HEALTH: "gut health",
    WellnessFocus.BLOOD_SUGAR_BALANCE: "blood sugar balance",
    WellnessFocus.BONE_JOINT_SUPPORT: "bone and joint health",
    WellnessFocus.ANTI_INFLAMMATORY: "reducing inflammation",
}

INSIGHT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "1-2 sentence contextual summary of this food for the user",
        },
        "focus_explanation": {
            "type": "string",
            "description": "Why this food works (or doesn't) for the user's wellness focus",
        },
        "tips": {
            "type": "array",
            "items": {"type": "string"},
            "description": "1-3 practical tips for timing, pairing, or preparation",
        },
        "considerations": {
            "type": "array",
            "items": {"type": "string"},
            "description": "0-2 things to be mindful of, only if genuinely relevant",
        },
    },
    "required": ["summary", "focus_explanation", "tips", "considerations"],
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "You are a friendly, knowledgeable nutritionist. "
    "Provide concise, personalized food insights."
)


@dataclass(frozen=True)
class InsightRequest:
    """Deterministic analysis of one food, as context for an insight."""

    food_name: str
    serving_description: str
    nutrition: NutritionRecord
    grading: GradingResult
    focus: WellnessFocus
    gi: GIResult | None = None


class InsightClient(Protocol):
    """Interface for structured LLM completions."""

    async def complete(
        self,
        *,
        model: str,
        store: bool,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return JSON matching the schema."""


class InsightGenerator(Protocol):
    """Interface for producing an insight from a deterministic analysis."""

    async def generate(self, request: InsightRequest) -> FoodInsight:
        """Return an insight; may raise on upstream failure."""


@dataclass
class FallbackInsightGenerator(InsightGenerator):
    """Builds an insight from the focus grade alone, without any external call."""

    async def generate(self, request: InsightRequest) -> FoodInsight:
        return fallback_insight(request)


@dataclass
class LLMInsightGenerator(InsightGenerator):
    """Generates insights with a structured-output LLM call."""

    client: InsightClient
    model: str
    store: bool = False

    async def generate(self, request: InsightRequest) -> FoodInsight:
        raw = await self.client.complete(
            model=self.model,
            store=self.store,
            system_prompt=SYSTEM_PROMPT,
            prompt=build_prompt(request),
            schema=INSIGHT_SCHEMA,
        )
        tips = raw.get("tips")
        considerations = raw.get("considerations")
        return FoodInsight.model_validate(
            {
                "summary": raw.get("summary") or "",
                "focus_explanation": raw.get("focus_explanation") or "",
                "tips": list(tips)[:MAX_TIPS] if isinstance(tips, list) else [],
                "considerations": (
                    list(considerations)[:MAX_CONSIDERATIONS]
                    if isinstance(considerations, list)
                    else []
                ),
            }
        )


def fallback_insight(request: InsightRequest) -> FoodInsight:
    """Derive an insight from the focus grade, its pros and its cons."""
    focus_grade = request.grading.focus(request.focus)
    focus_name = FOCUS_DISPLAY_NAMES[request.focus]
    name = request.food_name
    if focus_grade.grade is Grade.A:
        summary = (
            f"{name} is an excellent choice for {focus_name}, "
            "scoring highly across key metrics."
        )
    elif focus_grade.grade is Grade.B:
        summary = f"{name} is a good option for {focus_name}, with solid nutritional value."
    elif focus_grade.grade is Grade.C:
        summary = (
            f"{name} is a moderate choice for {focus_name}; "
            "consider balancing with nutrient-dense foods."
        )
    else:
        summary = f"{name} may not be ideal for {focus_name} goals. Best enjoyed occasionally."
    return FoodInsight(
        summary=summary,
        focus_explanation=focus_grade.insight
        or f"This food received a {focus_grade.grade.value} grade for {focus_name}.",
        tips=list(focus_grade.pros[:MAX_TIPS]),
        considerations=list(focus_grade.cons[:MAX_CONSIDERATIONS]),
    )


def build_prompt(request: InsightRequest) -> str:
    """Render the user prompt for one food."""
    n = request.nutrition
    grading = request.grading
    focus_grade = grading.focus(request.focus)
    focus_name = FOCUS_DISPLAY_NAMES[request.focus]

    nutrition_summary = "\n".join(
        [
            f"Calories: {n.calories:g} kcal",
            f"Protein: {n.protein:g}g",
            f"Carbs: {n.carbs:g}g (Fiber: {n.fiber:g}g, Sugar: {n.sugar:g}g)",
            f"Fat: {n.fat:g}g (Sat: {n.saturated_fat:g}g, Trans: {n.trans_fat:g}g)",
            f"Sodium: {n.sodium:g}mg",
            f"Key vitamins: A {n.vitamin_a:g}mcg, C {n.vitamin_c:g}mg, D {n.vitamin_d:g}mcg",
            f"Key minerals: Calcium {n.calcium:g}mg, Iron {n.iron:g}mg, "
            f"Potassium {n.potassium:g}mg",
        ]
    )
    grades_summary = "\n".join(
        [
            f"Overall Nutri-Score: {grading.overall.grade.value} ({grading.overall.score}/100)",
            f"{focus_name} Grade: {focus_grade.grade.value} ({focus_grade.score}/100)",
            f"Satiety: {grading.satiety.category.value} ({grading.satiety.score}/100)",
            f"Inflammatory: {grading.inflammatory.category.value} "
            f"(index: {grading.inflammatory.index})",
        ]
    )
    if request.gi is not None:
        gi_info = (
            f"Glycemic Index: {request.gi.gi} ({request.gi.gi_band.value}), "
            f"Glycemic Load: {request.gi.gl} ({request.gi.gl_band.value})"
        )
    else:
        gi_info = "Glycemic data: Not applicable (low-carb food)"

    return (
        "You are a friendly nutritionist providing personalized food insights.\n\n"
        f"FOOD ANALYZED:\n{request.food_name} ({request.serving_description})\n\n"
        f"NUTRITION DATA:\n{nutrition_summary}\n\n"
        f"GRADES & SCORES:\n{grades_summary}\n{gi_info}\n\n"
        f"USER'S WELLNESS FOCUS: {focus_name}\n\n"
        "Based on this analysis, provide a personalized insight. "
        "Be conversational but informative.\n"
        "- Summary: 1-2 sentences explaining what makes this food notable for their goals\n"
        "- Focus explanation: Why this food specifically helps (or hinders) their "
        f"{focus_name} goal\n"
        "- Tips: 1-3 practical, actionable tips (timing, pairings, preparation)\n"
        "- Considerations: 0-2 things to be mindful of "
        "(only if relevant, don't force negatives)\n\n"
        "Keep it concise and helpful. Focus on the most important points."
    )
