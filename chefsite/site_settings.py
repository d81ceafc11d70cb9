"""Site settings: typed defaults, persistence and derived values.

Every field of :class:`SiteSettings` carries its default at the type level,
so a stored blob that predates a newer key still produces a fully populated
object. The blob is persisted with camelCase keys (``heroImage``,
``giftCertificates`` ...) either in the ``site_settings`` table under the key
``site_settings`` or in local storage under ``siteSettings``.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import read, write
from .errors import ConnectivityError
from .local_storage import LocalStorage
from .logs import get_logger
from .models import SiteSettingsRow, utcnow
from .result import Ok, Result

SETTINGS_KEY = "site_settings"
LOCAL_STORAGE_KEY = "siteSettings"

logger = get_logger(__name__)


def camelize(name: str) -> str:
    """
    Convert ``snake_case`` to ``camelCase``; other names are returned as is.

    >>> camelize("hero_image")
    'heroImage'
    """
    if "_" not in name:
        return name
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class SettingsModel(BaseModel):
    """Base for settings sections: camelCase aliases, unknown keys dropped."""

    class Config:
        alias_generator = camelize
        populate_by_name = True
        extra = "ignore"

    def to_blob(self) -> dict[str, Any]:
        """Serialize with the persisted camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class ServiceDescriptions(SettingsModel):
    private_dinner_description: str = (
        "Experience a personalized dining experience in the comfort of your own home. "
        "I'll work with you to create a custom menu tailored to your preferences and "
        "dietary needs."
    )
    cooking_class_description: str = (
        "Learn new culinary skills and techniques in a fun and interactive environment. "
        "Classes are available for all skill levels and can be customized to focus on "
        "specific cuisines or techniques."
    )
    catering_description: str = (
        "From intimate gatherings to large events, I offer full-service catering with "
        "customized menus to suit your occasion. All dietary restrictions can be "
        "accommodated."
    )
    consultation_description: str = (
        "Need help planning a menu for a special occasion or want advice on kitchen "
        "organization? Book a consultation session to get professional culinary advice."
    )


class GiftCertificateSettings(SettingsModel):
    title: str = "Gift Certificates"
    subtitle: str = "Perfect for birthdays, anniversaries, or any special occasion."
    amounts: list[str] = Field(default_factory=lambda: ["50", "100", "200", "500", "Custom"])
    terms_and_conditions: str = "Gift certificates are valid for one year from the date of purchase."
    promo_text: str = "Looking for a unique gift? Give the gift of a memorable culinary experience."
    payment_qr_code_url: str = ""
    payment_instructions: str = (
        "To purchase a gift certificate, scan the QR code with your payment app and enter "
        "the desired amount. Please include your payment app username and recipient "
        "details in the form below. You will receive an email confirmation once your "
        "payment has been processed, which may take up to two business days."
    )


class InstagramSettings(SettingsModel):
    access_token: str = ""
    display_count: int = 6
    show_captions: bool = True
    cache_time: int = 60  # minutes
    title: str = "Instagram Feed"
    subtitle: str = "Follow me on Instagram for behind-the-scenes content and culinary inspiration."


class SocialMedia(SettingsModel):
    instagram: str = ""
    facebook: str = ""
    twitter: str = ""


class MessageNotifications(SettingsModel):
    enabled: bool = False
    email_addresses: str = ""


class ThemeColors(SettingsModel):
    primary: str = "#4A5568"
    secondary: str = "#718096"
    accent: str = "#F56565"
    background: str = "#FFFFFF"
    text: str = "#1A202C"
    success: Optional[str] = None
    error: Optional[str] = None
    warning: Optional[str] = None
    info: Optional[str] = None


class ThemeFonts(SettingsModel):
    heading: str = "Inter, sans-serif"
    body: str = "Inter, sans-serif"


class ThemeFontSizes(SettingsModel):
    base: str = "1rem"
    small: str = "0.875rem"
    large: str = "1.125rem"
    heading1: str = "2.25rem"
    heading2: str = "1.875rem"
    heading3: str = "1.5rem"


class ButtonSettings(SettingsModel):
    style: str = "default"
    hover_effect: str = "darken"


class ThemeSettings(SettingsModel):
    """
    Presentation settings.

    Enumerated values (``border_radius``, ``spacing``, ``content_width`` ...)
    are plain strings: unknown values are kept and
    :func:`compute_theme_variables` falls back for them.
    """

    preset: str = "classic"
    colors: ThemeColors = Field(default_factory=ThemeColors)
    fonts: ThemeFonts = Field(default_factory=ThemeFonts)
    font_sizes: Optional[ThemeFontSizes] = None
    border_radius: str = "medium"
    spacing: str = "normal"
    buttons: ButtonSettings = Field(default_factory=ButtonSettings)
    content_width: str = "normal"
    animations: str = "subtle"


class SiteSettings(SettingsModel):
    """All site-wide configurable content."""

    title: str = "Chef Margaret Alvis"
    hero_image: str = "/placeholder.svg"
    sign_up_instructions: str = (
        "Join our mailing list to receive updates about upcoming events, special offers, "
        "and new recipes."
    )
    about_title: str = "About Chef Margaret Alvis"
    about_content: str = (
        "Chef Margaret Alvis is a renowned culinary expert with over 15 years of "
        "experience in the industry. She specializes in farm-to-table cuisine with a "
        "focus on seasonal ingredients and sustainable practices."
    )
    about_image: str = "/placeholder.svg"
    contact_title: str = "Contact Chef Margaret"
    contact_subtitle: str = (
        "Get in touch to book a private dinner, cooking class, or catering event. "
        "I'll get back to you as soon as possible."
    )
    available_services: list[str] = Field(
        default_factory=lambda: ["private-dinner", "cooking-class", "catering", "consultation"]
    )
    services: ServiceDescriptions = Field(default_factory=ServiceDescriptions)
    gift_certificates: GiftCertificateSettings = Field(default_factory=GiftCertificateSettings)
    instagram: InstagramSettings = Field(default_factory=InstagramSettings)
    footer_text: str = "© 2023 Chef Margaret Alvis. All rights reserved."
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    message_notifications: MessageNotifications = Field(default_factory=MessageNotifications)
    theme: ThemeSettings = Field(default_factory=ThemeSettings)


DEFAULT_SETTINGS = SiteSettings()


def default_settings() -> SiteSettings:
    """Return a fresh copy of :data:`DEFAULT_SETTINGS`."""
    return DEFAULT_SETTINGS.model_copy(deep=True)


def _camel_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {camelize(str(k)): _camel_keys(v) for k, v in value.items()}
    return value


def deep_merge(base: Mapping, partial: Mapping) -> dict[str, Any]:
    """
    Merge ``partial`` over ``base``.

    Nested mappings are merged key by key; every other value in ``partial``
    (lists included) replaces the one in ``base``. Neither input is modified.
    """
    merged = dict(base)
    for key, value in partial.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def settings_from_blob(blob: Any) -> SiteSettings:
    """
    Reconcile a stored blob with the defaults.

    Missing keys take their default. A section that fails validation is
    replaced by its default and logged; a blob that is not an object yields
    the defaults.
    """
    if not isinstance(blob, Mapping):
        if blob is not None:
            logger.warning("site_settings_invalid_blob", blob_type=type(blob).__name__)
        return default_settings()

    defaults = default_settings().to_blob()
    partial = _camel_keys(blob)
    try:
        return SiteSettings.model_validate(deep_merge(defaults, partial))
    except ValidationError as exc:
        bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
        logger.warning("site_settings_invalid_sections", sections=sorted(map(str, bad)))
    cleaned = {k: v for k, v in partial.items() if k not in bad}
    try:
        return SiteSettings.model_validate(deep_merge(defaults, cleaned))
    except ValidationError as exc:
        logger.warning("site_settings_reset_to_defaults", error=str(exc))
        return default_settings()


def merge_settings(current: SiteSettings, partial: Mapping[str, Any]) -> SiteSettings:
    """
    Apply a partial update to ``current``.

    Only keys present in ``partial`` are overwritten; keys may be given in
    camelCase or snake_case.

    Raises:
        ValidationError: If the merged settings are invalid.
    """
    return SiteSettings.model_validate(deep_merge(current.to_blob(), _camel_keys(partial)))


class DatabaseSettingsStore:
    """Settings persisted as the single ``site_settings`` row."""

    def __init__(self, db: Session | None):
        self.db = db

    def load(self) -> Result[SiteSettings]:
        """Read the stored settings merged over the defaults."""

        def run(session: Session):
            row = session.get(SiteSettingsRow, SETTINGS_KEY)
            return settings_from_blob(row.value if row else None)

        return read(self.db, "fetch site settings", run)

    def exists(self) -> Result[bool]:
        """Report whether the settings row has been written."""
        return read(
            self.db,
            "check site settings",
            lambda session: session.get(SiteSettingsRow, SETTINGS_KEY) is not None,
        )

    def get(self) -> SiteSettings:
        """Read the settings; the defaults are returned when the store fails."""
        return self.load().unwrap_or_else(lambda error: default_settings())

    def save(self, settings: SiteSettings) -> bool:
        """
        Insert or update the settings row with the full object.

        Returns:
            bool: ``False`` when the store is unavailable or the write failed.
        """

        def run(session: Session):
            row = session.get(SiteSettingsRow, SETTINGS_KEY)
            if row is None:
                session.add(SiteSettingsRow(key=SETTINGS_KEY, value=settings.to_blob()))
            else:
                row.value = settings.to_blob()
                row.updated_at = utcnow()
            session.commit()
            return True

        try:
            return write(self.db, "save site settings", run)
        except (ConnectivityError, SQLAlchemyError):
            return False

    def update(self, partial: Mapping[str, Any]) -> SiteSettings | None:
        """
        Merge ``partial`` into the stored settings and save the result.

        Returns ``None`` without writing when the current settings cannot be
        read or the save fails.
        """
        result = self.load()
        if result.is_err():
            return None
        merged = merge_settings(result.unwrap(), partial)
        return merged if self.save(merged) else None


class LocalSettingsStore:
    """Settings persisted as a JSON string in local storage."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def load(self) -> Result[SiteSettings]:
        return Ok(settings_from_blob(self.storage.get_json(LOCAL_STORAGE_KEY, None)))

    def get(self) -> SiteSettings:
        return self.load().unwrap()

    def save(self, settings: SiteSettings) -> bool:
        self.storage.set_json(LOCAL_STORAGE_KEY, settings.to_blob())
        return True

    def update(self, partial: Mapping[str, Any]) -> SiteSettings:
        merged = merge_settings(self.get(), partial)
        self.save(merged)
        return merged


BORDER_RADIUS = {"none": "0", "small": "0.25rem", "medium": "0.375rem", "large": "0.5rem"}
SPACING = {"compact": "0.875rem", "normal": "1rem", "spacious": "1.25rem"}
CONTENT_WIDTH = {"narrow": "60rem", "normal": "65rem", "wide": "75rem", "full": "100%"}
STATUS_COLORS = {"success": "#48BB78", "error": "#F56565", "warning": "#ED8936", "info": "#4299E1"}


def compute_theme_variables(settings: SiteSettings) -> dict[str, str]:
    """
    Translate the theme into CSS custom properties.

    Unknown ``border_radius``, ``spacing`` and ``content_width`` values fall
    back to ``medium``, ``normal`` and ``normal``; unset status colours use
    the ``STATUS_COLORS`` palette.

    Args:
        settings (SiteSettings): Settings holding the theme.

    Returns:
        dict[str, str]: CSS variable name to value.
    """
    theme = settings.theme
    colors = theme.colors
    fonts = theme.fonts
    radius = BORDER_RADIUS.get(theme.border_radius, BORDER_RADIUS["medium"])
    spacing = SPACING.get(theme.spacing, SPACING["normal"])
    width = CONTENT_WIDTH.get(theme.content_width, CONTENT_WIDTH["normal"])

    return {
        "--color-primary": colors.primary,
        "--color-secondary": colors.secondary,
        "--color-accent": colors.accent,
        "--color-background": colors.background,
        "--color-text": colors.text,
        "--color-success": colors.success or STATUS_COLORS["success"],
        "--color-error": colors.error or STATUS_COLORS["error"],
        "--color-warning": colors.warning or STATUS_COLORS["warning"],
        "--color-info": colors.info or STATUS_COLORS["info"],
        "--color-primary-transparent": f"{colors.primary}80",
        "--font-heading": fonts.heading,
        "--font-body": fonts.body,
        "--border-radius": radius,
        "--spacing-unit": spacing,
        "--content-width": width,
        # framework palette overrides
        "--background": colors.background,
        "--foreground": colors.text,
        "--primary": colors.primary,
        "--primary-foreground": "#FFFFFF",
        "--secondary": colors.secondary,
        "--secondary-foreground": "#FFFFFF",
        "--accent": colors.accent,
        "--accent-foreground": "#FFFFFF",
        "--radius": radius,
    }


def notification_recipients(settings: SiteSettings) -> list[str]:
    """
    Addresses that should be told about new form submissions.

    Empty when notifications are disabled. The configured string may
    separate addresses with commas, semicolons or whitespace; invalid
    addresses are skipped.
    """
    notifications = settings.message_notifications
    if not notifications.enabled:
        return []

    recipients = []
    for candidate in re.split(r"[,;\s]+", notifications.email_addresses or ""):
        if not candidate:
            continue
        try:
            recipients.append(validate_email(candidate, check_deliverability=False).normalized)
        except EmailNotValidError:
            logger.warning("notification_address_invalid", address=candidate)
    if not recipients:
        logger.warning("notification_recipients_empty")
    return recipients
