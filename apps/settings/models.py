"""
System Settings models for the storefront checkout platform
Runtime store configuration with type validation and caching.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal, cast

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

# Valid data types for system settings
SettingDataType = Literal["string", "integer", "boolean", "json"]


class SystemSetting(models.Model):
    """⚙️ System setting with type validation and caching support"""

    DATA_TYPE_CHOICES: ClassVar[list[tuple[str, str]]] = [
        ("string", cast(str, _("String"))),
        ("integer", cast(str, _("Integer"))),
        ("boolean", cast(str, _("Boolean"))),
        ("json", cast(str, _("JSON"))),
    ]

    key = models.CharField(
        _("Key"),
        max_length=100,
        unique=True,
        help_text=_('Unique setting identifier (e.g., "checkout.flat_shipping_fee")'),
    )

    category = models.CharField(
        _("Category"), max_length=50, default="system", help_text=_("Setting category for organization")
    )

    name = models.CharField(_("Name"), max_length=200, help_text=_("Human-readable setting name"))

    description = models.TextField(_("Description"), blank=True, help_text=_("What this setting controls"))

    data_type = models.CharField(
        _("Data Type"),
        max_length=20,
        choices=DATA_TYPE_CHOICES,
        default="string",
        help_text=_("Type of data this setting stores"),
    )

    value = models.JSONField(_("Value"), null=True, blank=True, help_text=_("Current setting value"))

    default_value = models.JSONField(
        _("Default Value"), null=True, blank=True, help_text=_("Default value to use if setting is not configured")
    )

    is_active = models.BooleanField(
        _("Is Active"), default=True, help_text=_("Whether this setting is currently active")
    )

    created_at = models.DateTimeField(_("Created At"), default=timezone.now)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        db_table = "system_settings"
        verbose_name = _("System Setting")
        verbose_name_plural = _("System Settings")
        ordering: ClassVar = ["category", "key"]
        indexes: ClassVar = [
            models.Index(fields=["category"], name="idx_setting_category"),
        ]

    def __str__(self) -> str:
        return f"⚙️ {self.key}: {self.get_typed_value()}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.key and "." in self.key and self.category == "system":
            self.category = self.key.split(".")[0]
        super().save(*args, **kwargs)

    def clean(self) -> None:
        """Validate setting data"""
        super().clean()

        # Validate key format (category.setting_name)
        if self.key and "." not in self.key:
            raise ValidationError({"key": _('Setting key must be in format "category.setting_name"')})

        self._validate_value(self.value, "value")
        self._validate_value(self.default_value, "default_value")

    def _validate_value(self, value: Any, field_name: str) -> None:
        """Validate value against data type"""
        if value is None:
            return

        if self.data_type == "string" and not isinstance(value, str):
            raise ValidationError({field_name: _("Value must be a string")})
        if self.data_type == "boolean" and not isinstance(value, bool):
            raise ValidationError({field_name: _("Value must be a boolean")})
        if self.data_type == "integer":
            try:
                int(value)
            except (ValueError, TypeError) as e:
                raise ValidationError(
                    {field_name: _('Invalid value for data type "%(type)s": %(error)s')
                     % {"type": self.data_type, "error": str(e)}}
                ) from e

    def get_typed_value(self) -> Any:
        """Get the setting value converted to its proper Python type"""
        raw_value = self.default_value if self.value is None else self.value
        if raw_value is not None and self.data_type == "integer":
            return int(raw_value)
        return raw_value
