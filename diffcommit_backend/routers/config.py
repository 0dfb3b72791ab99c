"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from diffcommit_backend.services.config_manager import ConfigManager
from diffcommit_backend.services.errors import RangeEditError
from diffcommit_backend.services.llm_service import LLMService

router = APIRouter()

PROVIDER_SECTIONS = ("gemini", "openai", "openrouter", "vllm")


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    provider: str | None = None
    gemini: dict | None = None
    openai: dict | None = None
    openrouter: dict | None = None
    vllm: dict | None = None
    editing: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    provider: str
    gemini: dict
    openai: dict
    openrouter: dict
    vllm: dict
    editing: dict


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    provider: str


def mask_key(key: str) -> str:
    """Mask an API key, keeping its first and last four characters"""
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration"""
    config = ConfigManager.get_instance().get_config()

    sections = {}
    for name in PROVIDER_SECTIONS:
        section = config.get(name, {}).copy()
        section["apiKey"] = mask_key(section.get("apiKey", ""))
        sections[name] = section

    return ConfigResponse(
        provider=config.get("provider", "gemini"),
        editing=config.get("editing", {}),
        **sections,
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update configuration"""
    config_manager = ConfigManager.get_instance()
    current_config = config_manager.get_config()

    # Update only provided fields
    if request.provider:
        current_config["provider"] = request.provider
    for name in (*PROVIDER_SECTIONS, "editing"):
        update = getattr(request, name)
        if update:
            current_config[name] = {**current_config.get(name, {}), **update}

    config_manager.save_config(current_config)

    return {"status": "success", "message": "Configuration updated"}


@router.post("/validate", response_model=ValidateResponse)
async def validate_config() -> ValidateResponse:
    """Validate current configuration by testing LLM connection"""
    config = ConfigManager.get_instance().get_config()
    provider = config.get("provider", "gemini")

    try:
        response = await LLMService(config).generate_response("Say 'OK' if you can hear me.")
    except RangeEditError as e:
        return ValidateResponse(valid=False, message=f"Connection failed: {e}", provider=provider)

    if response:
        return ValidateResponse(valid=True, message=f"Successfully connected to {provider}", provider=provider)
    return ValidateResponse(valid=False, message="Received empty response from LLM", provider=provider)
