"""
Gemini Model Discovery
======================

Picks the Gemini model used for a request from the models the API key can
actually see, instead of hard-coding a model name that may be retired or
not enabled for the project.

Flow per request (no caching):
- List(v1)
- List(v1beta), only when the v1 listing came back empty
- Select: keep models supporting generateContent, prefer "flash", then
  "pro", then anything else, keeping listing order within a tier
- Fail with every listing error and model name seen when nothing qualifies
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from ai.errors import DiscoveryExhaustedError

GENERATE_METHOD = "generateContent"
MODEL_PREFIX = "models/"
V1 = "v1"
V1BETA = "v1beta"


class ListedModel(BaseModel):
    """A model entry from ListModels, e.g. name="models/gemini-1.5-flash-8b" """
    model_config = ConfigDict(frozen=True)

    name: str
    supported_generation_methods: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, entry: Dict[str, Any]) -> Optional["ListedModel"]:
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            return None
        methods = entry.get("supportedGenerationMethods")
        if not isinstance(methods, list):
            methods = []
        return cls(
            name=name,
            supported_generation_methods=tuple(m for m in methods if isinstance(m, str)),
        )


class ModelListing(BaseModel):
    """Outcome of one ListModels call; error is set when the call failed"""
    model_config = ConfigDict(frozen=True)

    version: str
    models: Tuple[ListedModel, ...] = ()
    error: Optional[str] = None

    @property
    def names(self) -> List[str]:
        return [m.name for m in self.models]


class SelectedModel(BaseModel):
    """Model and API version a generateContent call is sent to"""
    model_config = ConfigDict(frozen=True)

    version: str
    name: str

    @property
    def bare_name(self) -> str:
        return strip_model_prefix(self.name)


def strip_model_prefix(name: str) -> str:
    """ListModels returns "models/<id>"; the generate endpoint wants "<id>" """
    if name.startswith(MODEL_PREFIX):
        return name[len(MODEL_PREFIX):]
    return name


def supports_generation(model: ListedModel) -> bool:
    return GENERATE_METHOD in model.supported_generation_methods


def priority(name: str) -> int:
    lowered = name.lower()
    if "flash" in lowered:
        return 1
    if "pro" in lowered:
        return 2
    return 3


def pick_generation_model(models: Sequence[ListedModel]) -> Optional[ListedModel]:
    # sorted() is stable, so listing order breaks ties within a tier
    candidates = sorted(
        (m for m in models if supports_generation(m)),
        key=lambda m: priority(m.name),
    )
    return candidates[0] if candidates else None


def needs_fallback(v1: ModelListing) -> bool:
    """
    Whether v1beta should be listed at all.

    Only an empty v1 listing triggers the fallback. A v1 listing that holds
    models, none of which can generate content, does not.
    """
    return not v1.models


def _describe(listing: ModelListing) -> str:
    names = ", ".join(listing.names) or "none"
    return f"{listing.version} models ({len(listing.models)}): {names}"


def exhausted_message(v1: ModelListing, v1beta: ModelListing) -> str:
    reasons = [
        f"{V1}: {v1.error}" if v1.error else "",
        f"{V1BETA}: {v1beta.error}" if v1beta.error else "",
        _describe(v1),
        _describe(v1beta),
    ]
    return (
        "No Gemini models supporting generateContent were found for your project in v1 or v1beta. "
        "Ensure the API key is from a Google Cloud project with Generative Language API enabled "
        "and model access. Details: " + " | ".join(r for r in reasons if r)
    )


def select_model(v1: ModelListing, v1beta: Optional[ModelListing] = None) -> SelectedModel:
    """
    Choose the generation model, preferring v1.

    Raises:
        DiscoveryExhaustedError: neither listing holds a model supporting generateContent
    """
    if v1beta is None:
        v1beta = ModelListing(version=V1BETA)

    chosen = pick_generation_model(v1.models)
    if chosen is not None:
        return SelectedModel(version=v1.version, name=chosen.name)

    chosen = pick_generation_model(v1beta.models)
    if chosen is not None:
        return SelectedModel(version=v1beta.version, name=chosen.name)

    raise DiscoveryExhaustedError(exhausted_message(v1, v1beta), v1=v1, v1beta=v1beta)
