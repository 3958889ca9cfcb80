"""
Category catalogue - display copy and prompt templates per garment/accessory.

Every category is one CategoryProfile entry. Profiles differ only in data:
the analysis prompt tells Gemini which body region to describe, and the
generation template embeds that description verbatim in the edit instruction.
Adding a category means adding one entry here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..core.exceptions import UnknownCategory


class Category(str, Enum):
    """Supported garment and accessory kinds."""
    SHOES = "shoes"
    TSHIRTS = "tshirts"
    HOODIES = "hoodies"
    JACKETS = "jackets"
    PANTS = "pants"
    SUITS = "suits"
    TRADITIONAL = "traditional"
    SPORTSWEAR = "sportswear"
    GLASSES = "glasses"
    HATS = "hats"
    WATCHES = "watches"
    BRACELETS = "bracelets"
    BAGS = "bags"


class CategoryGroup(str, Enum):
    """Navigation group a category belongs to."""
    APPAREL = "apparel"
    ACCESSORIES = "accessories"


DEFAULT_CATEGORY = Category.SHOES


@dataclass(frozen=True)
class CategoryProfile:
    key: Category
    group: CategoryGroup
    title: str
    description: str
    item_label: str
    analysis_prompt: str
    generation_template: str  # must contain a single {analysis} placeholder

    def generation_prompt(self, analysis_text: str) -> str:
        """Build the edit instruction with the analysis embedded verbatim."""
        return self.generation_template.format(analysis=analysis_text)

    def describe(self) -> dict:
        """Display copy only (used by the API)."""
        return {
            "key": self.key.value,
            "group": self.group.value,
            "title": self.title,
            "description": self.description,
            "item_label": self.item_label,
        }


# ── Shared prompt fragments ──────────────────────────────────────────

_EDITOR = "You are an expert photo editor."
_PHOTOREAL = "The final image should be photorealistic."


def _profile(key, group, title, description, item_label, analysis, generation) -> CategoryProfile:
    return CategoryProfile(
        key=key,
        group=group,
        title=title,
        description=description,
        item_label=item_label,
        analysis_prompt=" ".join(analysis.split()),
        generation_template=" ".join(generation.split()),
    )


_APPAREL = CategoryGroup.APPAREL
_ACCESSORIES = CategoryGroup.ACCESSORIES

_PROFILES = [
    _profile(
        Category.SHOES, _APPAREL,
        "Virtual Shoe Try-On",
        "Upload a photo of a model and a photo of shoes to see them combined!",
        "Shoe Image",
        """Analyze the provided image of a person. Describe their pose, clothing style,
        the overall atmosphere of the photo, and the environment. Pay close attention to
        their feet and legs: are they visible, what is their position and angle, and what
        kind of footwear, if any, are they wearing? This information will be used to
        realistically place a new pair of shoes on them.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the shoes from the second image
        onto the person in the first image. Use this analysis of the person's pose and style
        to guide you: "{{analysis}}". {_PHOTOREAL} The lighting, shadows, and perspective of
        the new shoes must perfectly match the original photograph. Do not change the person
        or the background. Only replace the footwear.""",
    ),
    _profile(
        Category.TSHIRTS, _APPAREL,
        "Virtual T-Shirt Try-On",
        "Upload a photo of a model and a photo of a t-shirt to see them combined!",
        "T-Shirt Image",
        """Analyze the provided image of a person. Describe their pose, body shape, clothing
        style, the overall atmosphere of the photo, and the environment. Pay close attention
        to their torso and arms: are they visible, what is their position and angle, and what
        kind of top, if any, are they wearing? This information will be used to realistically
        place a new t-shirt on them.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the t-shirt from the second image
        onto the person in the first image. Use this analysis of the person's pose and style
        to guide you: "{{analysis}}". {_PHOTOREAL} The lighting, shadows, and perspective of
        the new t-shirt must perfectly match the original photograph. Ensure the t-shirt fits
        naturally on the person's body. Do not change the person or the background. Only
        replace their upper body clothing.""",
    ),
    _profile(
        Category.HOODIES, _APPAREL,
        "Virtual Hoodie/Sweatshirt Try-On",
        "Upload a photo of a model and a photo of a hoodie or sweatshirt to see them combined!",
        "Hoodie/Sweatshirt Image",
        """Analyze the provided image of a person. Describe their pose, body shape, clothing
        style, the overall atmosphere of the photo, and the environment. Pay close attention
        to their torso, shoulders, arms, and head/neck area: are they visible, what is their
        position and angle, and what kind of top, if any, are they wearing? This information
        will be used to realistically place a new hoodie or sweatshirt on them, including how
        a hood might rest on their shoulders or head.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the hoodie or sweatshirt from the
        second image onto the person in the first image. Use this analysis of the person's
        pose and style to guide you: "{{analysis}}". {_PHOTOREAL} The lighting, shadows, and
        perspective of the new top must perfectly match the original photograph. Ensure the
        hoodie/sweatshirt fits naturally on the person's body, paying attention to how a hood
        would drape. Do not change the person or the background. Only replace their upper
        body clothing.""",
    ),
    _profile(
        Category.JACKETS, _APPAREL,
        "Virtual Jacket/Coat Try-On",
        "Upload a photo of a model and a photo of a jacket or coat to see them combined!",
        "Jacket/Coat Image",
        """Analyze the provided image of a person. Describe their pose, body shape, and
        current clothing. Pay close attention to their torso, shoulders, and arms, noting
        their position and angle. This information will be used to realistically place a new
        jacket or coat over their current attire, ensuring it drapes correctly and fits their
        build.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the jacket or coat from the second
        image onto the person in the first image, placing it over their existing clothes. Use
        this analysis of the person's pose and style to guide you: "{{analysis}}".
        {_PHOTOREAL} The lighting, shadows, and perspective of the new outerwear must
        perfectly match the original photograph. Ensure the jacket/coat fits naturally on the
        person's body, paying attention to details like collars and how it hangs. Do not
        change the person, their inner clothes, or the background. Only add the jacket/coat
        as the outermost layer.""",
    ),
    _profile(
        Category.PANTS, _APPAREL,
        "Virtual Pants Try-On",
        "Upload a photo of a model and a photo of pants to see them combined!",
        "Pants Image",
        """Analyze the provided image of a person. Describe their pose, body shape, clothing
        style, the overall atmosphere of the photo, and the environment. Pay close attention
        to their lower body, waist, and legs: are they visible, what is their position and
        angle, and what kind of trousers/skirt, if any, are they wearing? This information
        will be used to realistically place a new pair of pants on them.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the pants from the second image
        onto the person in the first image. Use this analysis of the person's pose and style
        to guide you: "{{analysis}}". {_PHOTOREAL} The lighting, shadows, and perspective of
        the new pants must perfectly match the original photograph. Ensure the pants fit
        naturally on the person's body from the waist down. Do not change the person or the
        background. Only replace their lower body clothing.""",
    ),
    _profile(
        Category.SUITS, _APPAREL,
        "Virtual Suit Try-On",
        "Upload a photo of a model and a photo of a suit to see them combined!",
        "Suit Image",
        """Analyze the provided image of a person. Describe their pose, body build
        (shoulders, chest, waist), clothing style, the overall atmosphere of the photo, and
        the environment. Pay close attention to their entire figure, from shoulders to legs.
        Note the position of their arms and torso, and what kind of clothing they are
        currently wearing. This information will be used to realistically place a new suit
        (jacket and trousers) on them.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the suit from the second image onto
        the person in the first image. Use this analysis of the person's pose and build to
        guide you: "{{analysis}}". {_PHOTOREAL} The suit jacket should fit naturally over
        their torso and arms, and the trousers should fit their legs. The lighting, shadows,
        and perspective of the new suit must perfectly match the original photograph. Do not
        change the person or the background. Only replace their clothing with the complete
        suit.""",
    ),
    _profile(
        Category.TRADITIONAL, _APPAREL,
        "Virtual Traditional Wear Try-On",
        "For garments like kurtas, abayas, saris, etc. Upload a model photo and a photo of the item.",
        "Garment Image",
        """Analyze the provided image of a person. Describe their pose, body shape, and full
        body posture. Pay close attention to their shoulders, torso, waist, and legs, noting
        their position and angles. Consider the overall context and style. This information
        is crucial for realistically draping a traditional garment, which might be a flowing
        abaya, a wrapped sari, or a structured kurta, onto their figure.""",
        f"""You are an expert cultural fashion editor. Your task is to seamlessly photoshop
        the traditional garment from the second image onto the person in the first image. Use
        this analysis of the person's pose and build to guide you: "{{analysis}}". The final
        image should be photorealistic and culturally respectful. The lighting, shadows, and
        perspective of the new garment must perfectly match the original photograph. Ensure
        the garment drapes and fits naturally according to its specific type (e.g., a sari's
        pleats, a kurta's fit). Do not change the person or the background. Only replace
        their clothing with the traditional wear.""",
    ),
    _profile(
        Category.SPORTSWEAR, _APPAREL,
        "Virtual Sportswear Try-On",
        "Try on gym outfits, jerseys, and other athletic apparel.",
        "Sportswear Image",
        """Analyze the provided image of a person. Describe their pose, body build, and
        current clothing. Pay close attention to their torso, shoulders, and legs, noting
        their position and any athletic posture. This information will be used to
        realistically fit sportswear like a gym outfit or a jersey onto them.""",
        f"""You are an expert photo editor specializing in athletic apparel. Your task is to
        seamlessly photoshop the sportswear from the second image onto the person in the
        first image. Use this analysis of the person's pose and build to guide you:
        "{{analysis}}". {_PHOTOREAL} Ensure the sportswear fits naturally for an active
        context, showing how the fabric would stretch or hang. The lighting, shadows, and
        perspective of the new apparel must perfectly match the original photograph. Do not
        change the person or the background. Only replace their clothing with the
        sportswear.""",
    ),
    _profile(
        Category.GLASSES, _ACCESSORIES,
        "Virtual Glasses/Sunglasses Try-On",
        "Upload a photo of a model and a photo of eyewear to see them combined!",
        "Eyewear Image",
        """Analyze the provided image of a person. Describe their face shape, the position of
        their eyes, nose, and ears, and the angle of their head. This information will be
        used to realistically place glasses or sunglasses on their face.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the glasses/sunglasses from the
        second image onto the person's face in the first image. Use this analysis of the
        person's face and head position to guide you: "{{analysis}}". {_PHOTOREAL} Ensure
        the eyewear sits correctly on the nose and ears, and that the perspective matches the
        head's angle. Do not change any other part of the person or background.""",
    ),
    _profile(
        Category.HATS, _ACCESSORIES,
        "Virtual Hat/Cap Try-On",
        "Upload a photo of a model and a photo of a hat or cap to see them combined!",
        "Hat/Cap Image",
        """Analyze the provided image of a person. Describe their head shape, hairstyle, and
        the angle they are facing. This information will be used to realistically place a
        hat or cap on their head.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the hat/cap from the second image
        onto the person's head in the first image. Use this analysis of the person's head and
        hairstyle to guide you: "{{analysis}}". {_PHOTOREAL} The hat must fit naturally,
        casting appropriate shadows on the face and hair. Do not change the person or
        background.""",
    ),
    _profile(
        Category.WATCHES, _ACCESSORIES,
        "Virtual Watch Try-On",
        "Upload a photo of a model and a photo of a watch to see it on their wrist!",
        "Watch Image",
        """Analyze the provided image of a person. Pay close attention to their wrists and
        hands, noting their position, angle, and whether they are visible. This information
        will be used to realistically place a watch on their wrist.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the watch from the second image
        onto the person's wrist in the first image. Use this analysis of the person's arm and
        wrist to guide you: "{{analysis}}". The watch should fit snugly and be oriented
        correctly based on the arm's position. Match lighting and shadows perfectly. Do not
        change any other part of the person or background.""",
    ),
    _profile(
        Category.BRACELETS, _ACCESSORIES,
        "Virtual Bracelet Try-On",
        "Upload a photo of a model and a photo of a bracelet to see it on their wrist!",
        "Bracelet Image",
        """Analyze the provided image of a person. Pay close attention to their wrists and
        forearms, noting their position, angle, and whether they are visible. This
        information will be used to realistically place a bracelet on their wrist.""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the bracelet from the second image
        onto the person's wrist in the first image. Use this analysis of the person's arm and
        wrist to guide you: "{{analysis}}". The bracelet should drape or fit naturally
        depending on its style. Match lighting and shadows perfectly. Do not change any other
        part of the person or background.""",
    ),
    _profile(
        Category.BAGS, _ACCESSORIES,
        "Virtual Bag Try-On",
        "Upload a photo of a model and a photo of a bag to see them combined!",
        "Bag Image",
        """Analyze the provided image of a person's full-body pose. Describe how they are
        standing or sitting, the position of their arms, hands, and shoulders. This
        information will determine the most natural way to place a bag (e.g., held in hand,
        on the shoulder, or crossbody).""",
        f"""{_EDITOR} Your task is to seamlessly photoshop the bag from the second image onto
        the person in the first image. Use this analysis of the person's pose to guide you:
        "{{analysis}}". Place the bag in a natural position: either held, on the shoulder, or
        across the body. Ensure straps and handles interact realistically with their
        clothing and body. Match lighting and shadows. Do not change the person or
        background.""",
    ),
]

CATALOGUE: dict[Category, CategoryProfile] = {p.key: p for p in _PROFILES}

# First entry shown when a navigation group is opened
GROUP_DEFAULTS = {
    CategoryGroup.APPAREL: Category.SHOES,
    CategoryGroup.ACCESSORIES: Category.GLASSES,
}


def resolve_category(category: Union[Category, str]) -> Category:
    """Coerce a string ("hats") into a Category. Raises UnknownCategory."""
    if isinstance(category, Category):
        return category
    try:
        return Category(str(category).strip().lower())
    except ValueError:
        raise UnknownCategory(f"Unknown category: {category!r}")


def lookup(category: Union[Category, str]) -> CategoryProfile:
    """Return the profile for a category. Total over Category."""
    return CATALOGUE[resolve_category(category)]


def list_profiles(group: Optional[Union[CategoryGroup, str]] = None) -> list[CategoryProfile]:
    """All profiles in declaration order, optionally filtered by group."""
    if group is None:
        return list(_PROFILES)
    try:
        group = CategoryGroup(group)
    except ValueError:
        raise UnknownCategory(f"Unknown category group: {group!r}")
    return [p for p in _PROFILES if p.group == group]


def default_category(group: Union[CategoryGroup, str] = CategoryGroup.APPAREL) -> Category:
    try:
        return GROUP_DEFAULTS[CategoryGroup(group)]
    except ValueError:
        raise UnknownCategory(f"Unknown category group: {group!r}")
