from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for API payloads: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Auth / people
# ---------------------------------------------------------------------------


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class Role(ApiModel):
    id: int
    name: str


class User(ApiModel):
    id: int
    email: str
    full_name: Optional[str] = None
    is_active: bool = True
    roles: List[Role] = []


class StudentPermissions(ApiModel):
    can_access_routine: bool = True
    can_access_nutrition: bool = True
    can_access_weight: bool = True
    can_access_cardio: bool = True
    can_access_progress: bool = True


class SportPlan(ApiModel):
    id: int
    name: str
    monthly_fee: Optional[float] = None
    weekly_frequency: Optional[int] = None


class Student(ApiModel):
    id: int
    first_name: str = ""
    last_name: str = ""
    birth_date: Optional[str] = None
    phone: Optional[str] = None
    start_date: Optional[str] = None
    document: Optional[str] = None
    is_active: bool = True
    user_id: Optional[int] = None
    coach_id: Optional[int] = None
    sport_id: Optional[int] = None
    permissions: StudentPermissions = Field(default_factory=StudentPermissions)
    daily_steps_goal: Optional[int] = None
    weekly_weight_goal: Optional[float] = None
    user: Optional[User] = None
    sport_plan: Optional[SportPlan] = None
    effective_monthly_fee: Optional[float] = None
    email: Optional[str] = None
    objective: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Coach(ApiModel):
    id: int
    user_id: Optional[int] = None
    name: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True
    payment_alias: Optional[str] = None
    payment_notes: Optional[str] = None
    default_fee_amount: Optional[float] = None
    user: Optional[User] = None


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


class Fee(ApiModel):
    id: int
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    student_phone: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    month_name: Optional[str] = None
    # the API sends either 'value' or 'amount'
    value: Optional[float] = None
    amount: Optional[float] = None
    amount_paid: Optional[float] = None
    remaining_amount: Optional[float] = None
    due_date: Optional[str] = None
    due_day_of_month: Optional[int] = None
    status: str = "pending"
    paid_amount: Optional[float] = None
    paid_date: Optional[str] = None
    description: Optional[str] = None
    sport_name: Optional[str] = None
    sport_plan_name: Optional[str] = None
    is_overdue: Optional[bool] = None
    is_current: Optional[bool] = None

    @property
    def amount_due(self) -> float:
        if self.value is not None:
            return self.value
        if self.amount is not None:
            return self.amount
        return 0.0


class Payment(ApiModel):
    id: int
    fee_id: Optional[int] = None
    student_id: Optional[int] = None
    amount: Optional[float] = None
    amount_paid: Optional[float] = None
    payment_date: Optional[str] = None
    payment_method: Optional[str] = None
    reference: Optional[str] = None


class PriceSchedule(ApiModel):
    id: int
    effective_month: int
    effective_year: int
    amount: float
    month_name: Optional[str] = None
    sport_plan: Optional[SportPlan] = None
    student_name: Optional[str] = None


class PlanPrice(ApiModel):
    id: int
    name: str
    coach_price: Optional[float] = None
    default_price: Optional[float] = None


class CoachFeesOverview(ApiModel):
    fees: List[Fee] = []
    statistics: dict = {}
    period: dict = {}
    coach: Optional[dict] = None


# ---------------------------------------------------------------------------
# Nutrition
# ---------------------------------------------------------------------------


class FoodItem(ApiModel):
    id: Optional[int] = None
    name: str
    category: str = "otros"
    portion_grams: float = 100
    # the generated alias would capitalise the unit ("Per100G")
    carbs_per_100g: float = Field(default=0, alias="carbsPer100g")
    protein_per_100g: float = Field(default=0, alias="proteinPer100g")
    fat_per_100g: float = Field(default=0, alias="fatPer100g")
    calories_per_100g: float = Field(default=0, alias="caloriesPer100g")
    fiber_per_100g: Optional[float] = Field(default=None, alias="fiberPer100g")
    sodium_per_100g: Optional[float] = Field(default=None, alias="sodiumPer100g")
    student_id: Optional[int] = None
    coach_id: Optional[int] = None
    student_name: Optional[str] = None


class FoodCategory(ApiModel):
    value: str
    label: str


class MealPlanFood(ApiModel):
    id: Optional[int] = None
    food_item_id: Optional[int] = None
    name: str
    quantity: float = 0
    unit: str = "g"
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    notes: Optional[str] = None


class MealPlanMeal(ApiModel):
    id: Optional[int] = None
    name: str
    icon: str = "🍽️"
    order: int = 0
    total_calories: Optional[float] = None
    total_protein: Optional[float] = None
    total_carbs: Optional[float] = None
    total_fat: Optional[float] = None
    foods: List[MealPlanFood] = []


class AssignedStudent(ApiModel):
    id: int
    name: str
    is_customized: bool = False


class MealPlanTemplate(ApiModel):
    id: Optional[int] = None
    name: str
    objective: Optional[str] = None
    description: Optional[str] = None
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fat: float = 0
    meals_count: int = 0
    is_active: bool = True
    status: str = "draft"
    meals: List[MealPlanMeal] = []
    assigned_count: Optional[int] = None
    assigned_students: List[AssignedStudent] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AssignedPlan(ApiModel):
    id: int
    template_id: Optional[int] = None
    template_name: str = "Plan"
    student_id: Optional[int] = None
    student_name: str = "Alumno"
    is_customized: bool = False
    assigned_at: Optional[str] = None


class NutritionProfile(ApiModel):
    id: Optional[int] = None
    student_id: Optional[int] = None
    sex: Optional[str] = None
    age: Optional[int] = None
    current_weight: Optional[float] = None
    height_cm: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    training_days_per_week: Optional[int] = None
    activity_factor: Optional[float] = None
    target_daily_calories: Optional[float] = None
    target_protein_grams: Optional[float] = None
    target_carbs_grams: Optional[float] = None
    target_fat_grams: Optional[float] = None
    notes: Optional[str] = None


class MealType(ApiModel):
    id: int
    name: str
    display_order: int = 0
    is_active: bool = True


class FoodLogEntry(ApiModel):
    id: int
    daily_log_id: Optional[int] = None
    food_item_id: Optional[int] = None
    recipe_id: Optional[int] = None
    meal_type_id: Optional[int] = None
    quantity_grams: float = 0
    calories: float = 0
    protein: float = 0
    fat: float = 0
    carbs: float = 0
    food_item: Optional[FoodItem] = None
    meal_type: Optional[MealType] = None


class DailyFoodLog(ApiModel):
    id: Optional[int] = None
    student_id: Optional[int] = None
    date: Optional[str] = None
    total_calories: float = 0
    total_protein: float = 0
    total_fat: float = 0
    total_carbs: float = 0
    target_calories: Optional[float] = None
    target_protein: Optional[float] = None
    target_fat: Optional[float] = None
    target_carbs: Optional[float] = None
    entries: List[FoodLogEntry] = []


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class WeightLog(ApiModel):
    id: int
    date: str
    weight: float
    notes: Optional[str] = None


class SleepLog(ApiModel):
    id: int
    date: str
    sleep_hours: int = 0
    sleep_minutes: int = 0
    bedtime: Optional[str] = None
    quality: str = "PLENO"
    notes: Optional[str] = None


class Anthropometry(ApiModel):
    id: Optional[int] = None
    student_id: Optional[int] = None
    date: str
    weight: Optional[float] = None
    height_cm: Optional[float] = None

    # perimeters (cm)
    perimetro_brazo_relajado: Optional[float] = None
    perimetro_brazo_contraido: Optional[float] = None
    perimetro_antebrazo: Optional[float] = None
    perimetro_torax: Optional[float] = None
    perimetro_cintura: Optional[float] = None
    perimetro_caderas: Optional[float] = None
    perimetro_muslo_superior: Optional[float] = None
    perimetro_muslo_medial: Optional[float] = None
    perimetro_pantorrilla: Optional[float] = None

    # skinfolds (mm)
    pliegue_triceps: Optional[float] = None
    pliegue_subescapular: Optional[float] = None
    pliegue_supraespinal: Optional[float] = None
    pliegue_abdominal: Optional[float] = None
    pliegue_muslo_medial: Optional[float] = None
    pliegue_pantorrilla: Optional[float] = None
    suma_pliegues: Optional[float] = None

    # body composition, computed server side
    porcentaje_grasa: Optional[float] = None
    porcentaje_muscular: Optional[float] = None
    masa_grasa_kg: Optional[float] = None
    masa_magra_kg: Optional[float] = None
    tejido_muscular_kg: Optional[float] = None
    tejido_muscular_pct: Optional[float] = None
    tejido_adiposo_kg: Optional[float] = None
    # the backend really spells it this way
    tejido_adiposo_pct: Optional[float] = Field(default=None, alias="tejidoAdipodoPct")
    indice_muscular_oseo: Optional[float] = None

    photo_front: Optional[str] = None
    photo_side: Optional[str] = None
    photo_back: Optional[str] = None

    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CardioLog(ApiModel):
    id: int
    student_id: Optional[int] = None
    date: str
    activity_type: str
    duration_minutes: float = 0
    distance_km: Optional[float] = None
    calories_burned: Optional[float] = None
    intensity: Optional[str] = None
    steps: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Routine
# ---------------------------------------------------------------------------


class CatalogExercise(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    muscle_group: Optional[str] = None
    equipment: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None


class WorkoutSet(ApiModel):
    id: int
    reps: Optional[str] = None
    load: Optional[float] = None
    expected_rir: Optional[str] = None
    actual_rir: Optional[int] = None
    actual_rpe: Optional[int] = None
    notes: Optional[str] = None
    order: Optional[int] = None
    is_extra: bool = False
    status: str = "pending"
    is_amrap: bool = False
    amrap_instruction: Optional[str] = None
    amrap_notes: Optional[str] = None


class Exercise(ApiModel):
    id: int
    orden: int = 0
    exercise_catalog_id: Optional[int] = None
    exercise_catalog: Optional[CatalogExercise] = None
    series: Optional[str] = None
    repeticiones: Optional[str] = None
    descanso: Optional[str] = None
    rir_esperado: Optional[str] = None
    sets: List[WorkoutSet] = []

    @property
    def display_name(self) -> str:
        if self.exercise_catalog:
            return self.exercise_catalog.name
        return f"Ejercicio {self.orden}"


class TrainingDay(ApiModel):
    id: int
    dia: int = 0
    nombre: str = ""
    es_descanso: bool = False
    fecha: Optional[str] = None
    exercises: List[Exercise] = []


class Microcycle(ApiModel):
    id: int
    name: str
    week_number: Optional[int] = None
    is_deload: bool = False
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days: List[TrainingDay] = []


class Mesocycle(ApiModel):
    id: int
    name: str
    objetivo: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    order: int = 0
    microcycles: List[Microcycle] = []


class Macrocycle(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    student_id: Optional[int] = None
    mesocycles: List[Mesocycle] = []


class MesocycleTemplate(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    objective: Optional[str] = None
    estimated_weeks: Optional[int] = None
    target_days_per_week: Optional[int] = None
    tags: List[str] = []
    status: str = "draft"
    is_published: bool = False
    assigned_count: Optional[int] = None
