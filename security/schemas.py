"""Pydantic schemas for strict validation of every JSON-returning stage."""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from contracts import MasterPlan, WireModel


def _strings_only(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str)]


class PlannerOutput(MasterPlan):
    @field_validator("objective")
    @classmethod
    def _objective_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("objective must not be empty")
        return value

    @field_validator("sections")
    @classmethod
    def _sections_required(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("sections must not be empty")
        return value


class DesignerOutputSchema(WireModel):
    design_doc: str
    design_tokens_colors: list[str] = Field(default_factory=list)
    design_tokens_fonts: list[str] = Field(default_factory=list)

    @field_validator("design_tokens_colors", "design_tokens_fonts", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: Any) -> list[str]:
        return _strings_only(value)

    @field_validator("design_doc")
    @classmethod
    def _doc_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("designDoc must not be empty")
        return value


class RepairOutput(WireModel):
    message: str = "Applied semantic repair to generated files."
    files: dict[str, str]

    @field_validator("files", mode="before")
    @classmethod
    def _string_contents(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            raise ValueError("files must be an object")
        return {path: content for path, content in value.items() if isinstance(content, str)}

    @field_validator("files")
    @classmethod
    def _not_empty(cls, value: dict[str, str]) -> dict[str, str]:
        if not value:
            raise ValueError("files must not be empty")
        return value


# ── Template content ─────────────────────────────────────────────────────────


class HeroContent(WireModel):
    title: str = ""
    subtitle: str = ""
    primary_cta: str = "Get Started"
    secondary_cta: str = "Learn More"


class ServiceItem(WireModel):
    title: str = ""
    description: str = ""


class AboutContent(WireModel):
    title: str = ""
    body: str = ""


class ContactContent(WireModel):
    title: str = "Contact"
    email: str = "hello@example.com"
    phone: str = ""
    address: str = ""


class FaqItem(WireModel):
    question: str = ""
    answer: str = ""


class FooterContent(WireModel):
    copyright: str = ""
    links: list[str] = Field(default_factory=list)

    @field_validator("links", mode="before")
    @classmethod
    def _stringify_links(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(v) for v in value]


class TemplateSections(WireModel):
    hero: HeroContent
    services: list[ServiceItem] = Field(default_factory=list)
    about: AboutContent
    contact: ContactContent
    faq: list[FaqItem] = Field(default_factory=list)
    footer: FooterContent

    @field_validator("services", "faq", mode="before")
    @classmethod
    def _objects_only(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [v for v in value if isinstance(v, (dict, BaseModel))]

    @model_validator(mode="after")
    def _required_substructure(self) -> "TemplateSections":
        if not self.hero.title.strip():
            raise ValueError("hero.title must not be empty")
        if not self.services:
            raise ValueError("at least one service is required")
        if not self.faq:
            raise ValueError("at least one FAQ entry is required")
        return self
