"""
Input validation schemas using Pydantic for manual entry, camera loading and imports.
"""
from datetime import datetime
from typing import List, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from filmstock.domain.ExpiryDate import is_valid, sanitize_input, validate_expiry_dates
from filmstock.domain.FilmUnit import FilmFormat, FilmType, FilmUnit, ImageReference
from filmstock.domain.LoadedFilm import DevelopmentStatus
from filmstock.domain.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def _split_dates(v):
    if v is None:
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(",")]
    return v


class FilmInput(BaseModel):
    """Schema for adding or editing a film from the form.

    Expiry dates typed as digits ("122026") are run through the same
    sanitizer as the input field; a date that still fails raises the
    ExpiryDateError from the date module unchanged, index included.
    """
    name: str = Field(..., min_length=1, max_length=200)
    manufacturer: str = Field(..., min_length=1, max_length=100)
    type: FilmType
    speed: int = Field(..., ge=1, le=100000)
    format: str = Field(..., min_length=1)
    custom_format_name: Optional[str] = None
    quantity: int = Field(1, ge=0, le=100000)
    expiry_dates: List[str] = Field(default_factory=list)
    is_frozen: bool = False
    exposures: Optional[int] = Field(None, ge=1)
    comments: Optional[str] = None

    @field_validator('name', 'manufacturer')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        v = v.strip()
        if not v:
            raise ValueError('cannot be blank')
        return v

    @field_validator('type', mode='before')
    @classmethod
    def parse_type(cls, v):
        return FilmType.parse(v) if isinstance(v, str) else v

    @field_validator('expiry_dates', mode='before')
    @classmethod
    def validate_dates(cls, v):
        # Blanks stay in place so error indexes match the submitted list
        raw = ["" if d is None else str(d) for d in _split_dates(v)]
        cleaned = [d if not d.strip() or is_valid(d) else (sanitize_input(d) or d) for d in raw]
        return validate_expiry_dates(cleaned)

    @field_validator('comments')
    @classmethod
    def empty_comments_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    def film_format(self) -> FilmFormat:
        return FilmFormat.parse(self.format, self.custom_format_name)

    def to_unit(self, image: Optional[ImageReference] = None, id: str = "") -> FilmUnit:
        return FilmUnit(
            id=id,
            name=self.name,
            manufacturer=self.manufacturer,
            type=self.type,
            speed=self.speed,
            format=self.film_format(),
            quantity=self.quantity,
            expiry_dates=self.expiry_dates,
            is_frozen=self.is_frozen,
            exposures=self.exposures,
            comments=self.comments,
            image=image,
        )


class LoadFilmInput(BaseModel):
    film_id: str = Field(..., min_length=1)
    format: str = Field(..., min_length=1)
    custom_format_name: Optional[str] = None
    camera_name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(1, ge=1)
    shot_at_iso: Optional[int] = Field(None, ge=1)

    @field_validator('camera_name')
    @classmethod
    def strip_camera(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('cannot be blank')
        return v

    def film_format(self) -> FilmFormat:
        return FilmFormat.parse(self.format, self.custom_format_name)


class UnloadFilmInput(BaseModel):
    return_unused: bool = False
    quantity: Optional[int] = Field(None, ge=1)


class DevelopmentStatusInput(BaseModel):
    status: DevelopmentStatus


class CameraInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    format: Optional[str] = None
    custom_format_name: Optional[str] = None

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    def film_format(self) -> Optional[FilmFormat]:
        if not self.format:
            return None
        return FilmFormat.parse(self.format, self.custom_format_name)


class ManufacturerInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()


class ImportedFilm(BaseModel):
    """One interchange record.

    Accepts the export's camelCase keys as well as the snake_case field
    names. Missing optional fields default to empty, false or null.
    """
    model_config = ConfigDict(populate_by_name=True)

    manufacturer: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: FilmType = FilmType.BW
    speed: int = Field(..., ge=1, validation_alias=AliasChoices('speed', 'iso', 'ISO'))
    format: str = ''
    custom_format_name: Optional[str] = Field(
        None, validation_alias=AliasChoices('custom_format_name', 'customFormat', 'customFormatName'))
    quantity: int = Field(1, ge=0)
    expiry_dates: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('expiry_dates', 'expiryDates', 'expiryDate', 'expiry', 'expireDate'))
    is_frozen: bool = Field(False, validation_alias=AliasChoices('is_frozen', 'isFrozen', 'frozen'))
    exposures: Optional[int] = Field(None, ge=1)
    comments: Optional[str] = None
    added_at: Optional[datetime] = Field(None, validation_alias=AliasChoices('added_at', 'addedAt', 'createdAt'))

    @field_validator('manufacturer', 'name', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('type', mode='before')
    @classmethod
    def parse_type(cls, v):
        return FilmType.parse(v) if isinstance(v, str) else v

    @field_validator('quantity', mode='before')
    @classmethod
    def default_quantity(cls, v):
        return 1 if v is None or v == '' else v

    @field_validator('exposures', 'added_at', 'custom_format_name', 'comments', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return None if isinstance(v, str) and not v.strip() else v

    @field_validator('expiry_dates', mode='before')
    @classmethod
    def validate_dates(cls, v):
        return validate_expiry_dates(_split_dates(v))

    def film_format(self) -> FilmFormat:
        '''Unknown format strings become custom formats; "Other" with no name becomes "Custom".'''
        return FilmFormat.parse(self.format or 'Other', self.custom_format_name or 'Custom')

    def to_unit(self) -> FilmUnit:
        return FilmUnit(
            name=self.name,
            manufacturer=self.manufacturer,
            type=self.type,
            speed=self.speed,
            format=self.film_format(),
            quantity=self.quantity,
            expiry_dates=self.expiry_dates,
            is_frozen=self.is_frozen,
            exposures=self.exposures,
            comments=self.comments,
            created_at=self.added_at,
        )


def parse_input(model: Type[M], data) -> M:
    """Validate ``data`` against ``model``, raising the domain ValidationError.

    The first pydantic error decides the reported field; a list position in
    its location becomes the error's index.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = list(first.get('loc') or ())
        index = next((p for p in loc if isinstance(p, int)), None)
        field = next((str(p) for p in loc if not isinstance(p, int)), '__root__')
        raise ValidationError(field, first.get('msg', 'invalid value'), index) from e
