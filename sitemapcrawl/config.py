import os
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

try:
	from dotenv import load_dotenv
except ImportError:
	logging.warning("python-dotenv not available; using environment variables only")
else:
	loaded = load_dotenv()
	if not loaded and Path(".env").exists():
		raise RuntimeError(".env file present but failed to load")

T = TypeVar("T")


def _raw(name: str) -> Optional[str]:
	"""Return the variable's value, treating empty strings as unset."""
	value = os.getenv(name)
	return value if value else None


def _parse(name: str, cast: Callable[[str], T], fallback):
	raw = _raw(name)
	if raw is None:
		return fallback
	try:
		return cast(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return fallback


def get_str_env(name: str, default: str) -> str:
	return _raw(name) or default


def get_optional_str_env(name: str) -> Optional[str]:
	return _raw(name)


def get_int_env(name: str, default: int) -> int:
	return _parse(name, int, default)


def get_float_env(name: str, default: float) -> float:
	return _parse(name, float, default)
