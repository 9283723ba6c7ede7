"""Static glycemic index reference values.

GI values follow the international GI tables (glucose = 100). Serving sizes
and carbohydrate amounts describe a typical portion.
"""

from nutrition_pipeline.domain.glycemic import GIConfidence, GIReferenceEntry

_HIGH = GIConfidence.HIGH
_MEDIUM = GIConfidence.MEDIUM
_LOW = GIConfidence.LOW


def _entry(  # noqa: PLR0913
    name: str,
    gi: int,
    serving_grams: float,
    carbs_per_serving: float,
    confidence: GIConfidence,
    category: str,
    *aliases: str,
) -> tuple[str, GIReferenceEntry]:
    return name, GIReferenceEntry(
        name=name,
        gi=gi,
        serving_grams=serving_grams,
        carbs_per_serving=carbs_per_serving,
        confidence=confidence,
        category=category,
        aliases=aliases,
    )


GI_REFERENCE: dict[str, GIReferenceEntry] = dict(
    [
        # bread
        _entry("white bread", 75, 30, 14, _HIGH, "bread", "white toast", "sandwich bread"),
        _entry("whole wheat bread", 74, 30, 12, _HIGH, "bread", "wholemeal bread"),
        _entry("sourdough bread", 54, 30, 14, _MEDIUM, "bread", "sourdough"),
        _entry("rye bread", 58, 30, 13, _MEDIUM, "bread", "pumpernickel"),
        _entry("bagel", 72, 70, 35, _HIGH, "bread"),
        _entry("croissant", 67, 57, 26, _MEDIUM, "bread"),
        _entry("pita bread", 68, 30, 16, _MEDIUM, "bread", "pita"),
        _entry("corn tortilla", 46, 50, 22, _MEDIUM, "bread"),
        _entry("wheat tortilla", 30, 50, 26, _MEDIUM, "bread", "flour tortilla"),
        # cereal
        _entry("oatmeal", 55, 250, 21, _HIGH, "cereal", "porridge", "rolled oats"),
        _entry("instant oatmeal", 79, 250, 26, _HIGH, "cereal", "instant oats"),
        _entry("cornflakes", 81, 30, 26, _HIGH, "cereal", "corn flakes"),
        _entry("muesli", 57, 30, 20, _MEDIUM, "cereal"),
        _entry("granola", 55, 30, 19, _LOW, "cereal"),
        _entry("bran flakes", 74, 30, 18, _MEDIUM, "cereal"),
        # rice
        _entry("white rice", 73, 150, 43, _HIGH, "rice", "steamed rice"),
        _entry("brown rice", 68, 150, 33, _HIGH, "rice"),
        _entry("basmati rice", 58, 150, 38, _HIGH, "rice"),
        _entry("jasmine rice", 89, 150, 42, _MEDIUM, "rice"),
        _entry("wild rice", 57, 150, 32, _MEDIUM, "rice"),
        # pasta
        _entry("spaghetti", 49, 180, 48, _HIGH, "pasta", "pasta"),
        _entry("whole wheat spaghetti", 48, 180, 40, _HIGH, "pasta", "whole wheat pasta"),
        _entry("macaroni", 47, 180, 48, _MEDIUM, "pasta"),
        _entry("rice noodles", 53, 180, 39, _MEDIUM, "pasta"),
        _entry("udon noodles", 55, 180, 48, _MEDIUM, "pasta", "udon"),
        # grain
        _entry("quinoa", 53, 150, 30, _HIGH, "grain"),
        _entry("couscous", 65, 150, 35, _MEDIUM, "grain"),
        _entry("bulgur", 48, 150, 26, _MEDIUM, "grain", "bulgur wheat"),
        _entry("barley", 28, 150, 32, _HIGH, "grain", "pearl barley"),
        _entry("buckwheat", 49, 150, 30, _MEDIUM, "grain"),
        _entry("polenta", 68, 150, 20, _MEDIUM, "grain", "cornmeal"),
        _entry("millet", 71, 150, 36, _MEDIUM, "grain"),
        # legume
        _entry("lentils", 32, 150, 18, _HIGH, "legume", "red lentils", "green lentils"),
        _entry("chickpeas", 28, 150, 30, _HIGH, "legume", "garbanzo beans"),
        _entry("kidney beans", 24, 150, 25, _HIGH, "legume"),
        _entry("black beans", 30, 150, 23, _MEDIUM, "legume"),
        _entry("baked beans", 40, 150, 15, _MEDIUM, "legume"),
        _entry("hummus", 6, 30, 5, _MEDIUM, "legume", "houmous"),
        _entry("soybeans", 16, 150, 6, _MEDIUM, "legume", "edamame"),
        _entry("green peas", 51, 80, 7, _MEDIUM, "legume", "peas"),
        # vegetable
        _entry("potato", 78, 150, 26, _HIGH, "vegetable", "white potato"),
        _entry("mashed potatoes", 87, 150, 20, _HIGH, "vegetable", "mashed potato"),
        _entry("french fries", 63, 150, 29, _MEDIUM, "vegetable", "fries"),
        _entry("sweet potato", 63, 150, 28, _HIGH, "vegetable"),
        _entry("carrots", 39, 80, 6, _HIGH, "vegetable", "carrot"),
        _entry("sweet corn", 52, 80, 16, _MEDIUM, "vegetable", "corn on the cob"),
        _entry("pumpkin", 64, 80, 4, _MEDIUM, "vegetable"),
        _entry("beetroot", 64, 80, 7, _MEDIUM, "vegetable", "beets"),
        _entry("parsnip", 52, 80, 12, _LOW, "vegetable", "parsnips"),
        # fruit
        _entry("apple", 36, 120, 15, _HIGH, "fruit", "apples"),
        _entry("banana", 51, 120, 25, _HIGH, "fruit", "bananas"),
        _entry("orange", 43, 120, 11, _HIGH, "fruit", "oranges"),
        _entry("grapes", 59, 120, 18, _MEDIUM, "fruit", "grape"),
        _entry("watermelon", 76, 120, 6, _MEDIUM, "fruit"),
        _entry("pineapple", 59, 120, 13, _MEDIUM, "fruit"),
        _entry("mango", 51, 120, 17, _MEDIUM, "fruit"),
        _entry("strawberries", 40, 120, 3, _MEDIUM, "fruit", "strawberry"),
        _entry("blueberries", 53, 120, 14, _MEDIUM, "fruit", "blueberry"),
        _entry("cherries", 22, 120, 12, _MEDIUM, "fruit", "cherry"),
        _entry("pear", 38, 120, 11, _HIGH, "fruit", "pears"),
        _entry("peach", 42, 120, 11, _MEDIUM, "fruit", "peaches"),
        _entry("kiwi", 53, 120, 12, _MEDIUM, "fruit", "kiwifruit"),
        _entry("dates", 42, 60, 40, _MEDIUM, "fruit"),
        _entry("raisins", 64, 60, 44, _MEDIUM, "fruit"),
        # dairy
        _entry("whole milk", 39, 250, 12, _HIGH, "dairy", "milk", "full fat milk"),
        _entry("skim milk", 37, 250, 13, _HIGH, "dairy", "skimmed milk"),
        _entry("plain yogurt", 41, 200, 12, _MEDIUM, "dairy", "yogurt", "yoghurt"),
        _entry("greek yogurt", 11, 200, 8, _MEDIUM, "dairy"),
        _entry("ice cream", 51, 50, 13, _MEDIUM, "dairy"),
        _entry("soy milk", 34, 250, 9, _MEDIUM, "dairy"),
        _entry("custard", 35, 100, 17, _LOW, "dairy"),
        # beverage
        _entry("orange juice", 50, 250, 26, _HIGH, "beverage"),
        _entry("apple juice", 41, 250, 29, _HIGH, "beverage"),
        _entry("cola", 63, 250, 26, _MEDIUM, "beverage", "coke", "soft drink"),
        _entry("sports drink", 78, 250, 15, _MEDIUM, "beverage", "gatorade"),
        # snack
        _entry("potato chips", 56, 50, 26, _MEDIUM, "snack", "crisps"),
        _entry("popcorn", 65, 20, 11, _MEDIUM, "snack"),
        _entry("pretzels", 83, 30, 20, _MEDIUM, "snack", "pretzel"),
        _entry("rice cakes", 82, 25, 21, _MEDIUM, "snack", "rice cake"),
        _entry("milk chocolate", 43, 50, 28, _MEDIUM, "snack", "chocolate bar"),
        _entry("dark chocolate", 23, 50, 20, _LOW, "snack"),
        _entry("peanuts", 14, 50, 6, _MEDIUM, "snack", "peanut"),
        _entry("cashews", 22, 50, 13, _MEDIUM, "snack", "cashew nuts"),
        _entry("saltine crackers", 74, 25, 17, _MEDIUM, "snack", "saltines"),
        _entry("doughnut", 76, 47, 23, _MEDIUM, "snack", "donut"),
        _entry("sponge cake", 46, 63, 36, _LOW, "snack"),
        # sweetener
        _entry("white sugar", 65, 10, 10, _HIGH, "sweetener", "table sugar", "sucrose"),
        _entry("honey", 61, 25, 21, _MEDIUM, "sweetener"),
        _entry("maple syrup", 54, 25, 17, _MEDIUM, "sweetener"),
        _entry("glucose", 100, 10, 10, _HIGH, "sweetener", "dextrose"),
        _entry("agave syrup", 15, 25, 19, _LOW, "sweetener", "agave nectar"),
        # mixed meals
        _entry("cheese pizza", 80, 100, 27, _MEDIUM, "mixed_meal", "pizza"),
        _entry("hamburger", 66, 150, 30, _MEDIUM, "mixed_meal", "burger", "cheeseburger"),
        _entry("sushi", 52, 100, 37, _MEDIUM, "mixed_meal"),
        _entry("lasagna", 47, 250, 35, _LOW, "mixed_meal", "lasagne"),
    ]
)

CATEGORY_DEFAULTS: dict[str, int] = {
    "bread": 70,
    "cereal": 65,
    "rice": 70,
    "pasta": 50,
    "grain": 55,
    "legume": 30,
    "vegetable": 40,
    "fruit": 45,
    "dairy": 35,
    "beverage": 55,
    "snack": 60,
    "sweetener": 65,
    "mixed_meal": 55,
    "other": 50,
}

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "bread": ("bread", "toast", "roll", "bun", "bagel", "muffin", "croissant", "pita", "tortilla"),
    "cereal": ("cereal", "oatmeal", "granola", "muesli", "porridge", "flakes"),
    "rice": ("rice", "risotto"),
    "pasta": (
        "pasta",
        "spaghetti",
        "noodle",
        "penne",
        "macaroni",
        "fettuccine",
        "linguine",
        "lasagna",
    ),
    "grain": ("quinoa", "couscous", "bulgur", "barley", "buckwheat", "millet", "farro", "polenta"),
    "legume": ("bean", "lentil", "chickpea", "pea", "hummus", "dal", "falafel"),
    "vegetable": (
        "vegetable",
        "salad",
        "broccoli",
        "spinach",
        "carrot",
        "potato",
        "tomato",
        "pepper",
        "onion",
        "mushroom",
        "celery",
        "corn",
        "squash",
    ),
    "fruit": (
        "apple",
        "banana",
        "orange",
        "grape",
        "berry",
        "melon",
        "mango",
        "peach",
        "pear",
        "plum",
        "cherry",
        "pineapple",
        "fruit",
    ),
    "dairy": ("milk", "yogurt", "cheese", "cream", "custard", "pudding"),
    "beverage": ("juice", "soda", "cola", "drink", "smoothie", "shake"),
    "snack": (
        "chip",
        "cracker",
        "cookie",
        "cake",
        "chocolate",
        "candy",
        "nut",
        "bar",
        "popcorn",
        "pretzel",
    ),
    "sweetener": ("sugar", "honey", "syrup", "sweetener"),
    "mixed_meal": (
        "pizza",
        "burger",
        "sandwich",
        "taco",
        "burrito",
        "curry",
        "soup",
        "stew",
        "casserole",
    ),
}
