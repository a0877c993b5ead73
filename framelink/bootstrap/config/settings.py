import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from framelink.core.models.byteorder import ByteOrder
from framelink.core.models.config import ProtocolConfig


class FramingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FRAMELINK_",
        extra="ignore"
    )

    head_size: Annotated[
        int,
        Field(
            description=(
                "Width of the length header in bytes: 1, 2, 4 or 8.\n"
                "Bounds the largest representable payload to 2**(8*n) - 1 bytes.\n"
                "Both ends of a stream must agree on it."
            ),
            default=4
        )
    ]

    byte_order: Annotated[
        Literal["big", "little"],
        Field(
            description="Byte order of the length header.",
            default="big"
        )
    ]

    max_packet_size: Annotated[
        int,
        Field(
            description=(
                "Largest accepted payload in bytes, header excluded. 0 means unlimited.\n"
                "Reading a header above this limit fails before the payload is buffered."
            ),
            default=0,
            ge=0
        )
    ]

    @field_validator("head_size")
    @classmethod
    def validate_head_size(cls, v: int) -> int:
        if v not in (1, 2, 4, 8):
            raise ValueError(f"unsupported packet head size: {v}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings

    def to_config(self) -> ProtocolConfig:
        return ProtocolConfig(
            head_size=self.head_size,
            byte_order=ByteOrder(self.byte_order),
            max_packet_size=self.max_packet_size,
        )


def load_settings(configfile: Path | None = None, **overrides: Any) -> FramingSettings:
    """
    Build the settings from, by priority: overrides, environment,
    YAML file, defaults.
    """
    class FileFramingSettings(FramingSettings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
            if configfile is not None:
                sources += (YamlConfigSettingsSource(settings_cls, yaml_file=configfile),)
            return sources

    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        return FileFramingSettings(**overrides)
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
