"""Disease encyclopedia models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models.
#
# A ``Disease`` row carries its base-language content plus a list of
# ``DiseaseTranslation`` rows (uz / ru / en).  ``Disease.localized()``
# returns a copy with the requested language's fields merged over the
# base ones; empty translated lists fall back to the base lists.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    """Portal content languages."""

    UZ = "uz"
    RU = "ru"
    EN = "en"


class DiseaseTranslation(BaseModel):
    """Per-language content for one disease."""

    model_config = ConfigDict(frozen=True)

    disease_id: str
    language: Language
    name: str
    slug: str
    description: str = ""
    symptoms: list[str] = Field(default_factory=list)
    treatment_methods: list[str] = Field(default_factory=list)
    prevention_tips: list[str] = Field(default_factory=list)
    meta_title: str | None = None
    meta_description: str | None = None


class Disease(BaseModel):
    """A disease record as shown on the public encyclopedia pages."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    description: str = ""
    symptoms: list[str] = Field(default_factory=list)
    treatment_methods: list[str] = Field(default_factory=list)
    prevention_tips: list[str] = Field(default_factory=list)
    featured_image_url: str | None = None
    youtube_url: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    active: bool = True
    featured: bool = False
    order_index: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    translations: list[DiseaseTranslation] = Field(default_factory=list)
    current_language: Language | None = None

    def translation_for(self, language: str) -> DiseaseTranslation | None:
        for translation in self.translations:
            if translation.language.value == language:
                return translation
        return None

    def localized(self, language: str) -> Disease:
        """Return this disease with *language* content merged in, if available."""
        translation = self.translation_for(language)
        if translation is None:
            return self
        return self.model_copy(
            update={
                "name": translation.name,
                "slug": translation.slug,
                "description": translation.description,
                "symptoms": translation.symptoms or self.symptoms,
                "treatment_methods": translation.treatment_methods or self.treatment_methods,
                "prevention_tips": translation.prevention_tips or self.prevention_tips,
                "meta_title": translation.meta_title or self.meta_title,
                "meta_description": translation.meta_description or self.meta_description,
                "current_language": translation.language,
            }
        )


class CreateDiseaseData(BaseModel):
    """Admin payload for a new disease."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: str = ""
    symptoms: list[str] = Field(default_factory=list)
    treatment_methods: list[str] = Field(default_factory=list)
    prevention_tips: list[str] = Field(default_factory=list)
    youtube_url: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    active: bool = True
    featured: bool = False
    order_index: int = 0


class UpdateDiseaseData(BaseModel):
    """Partial admin update; only fields that are set are sent."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    symptoms: list[str] | None = None
    treatment_methods: list[str] | None = None
    prevention_tips: list[str] | None = None
    youtube_url: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    active: bool | None = None
    featured: bool | None = None
    order_index: int | None = None
