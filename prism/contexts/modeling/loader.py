"""
Loading and saving PRISM documents.

Master resumes and variant specifications are stored as YAML (or JSON, which
OmegaConf reads as YAML). Persistence policy belongs to the caller; these
helpers only translate between files and the modeling data structures.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml
from omegaconf import OmegaConf

from prism.contexts.modeling.logger import _log_debug, _log_info
from prism.contexts.modeling.resume_data_structure import MasterResume
from prism.contexts.modeling.variant_data_structure import VariantSpec


def _load_mapping(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML/JSON file into plain Python containers.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file isn't valid YAML/JSON or its top level isn't a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        config = OmegaConf.load(path)
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse {path}: {e}") from e

    # Resume text may contain "${...}"; it is content, not an interpolation
    data = OmegaConf.to_container(config, resolve=False)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")

    _log_debug(f"Loaded {path} ({len(data)} top-level keys)")
    return data


def load_master(path: Union[str, Path]) -> MasterResume:
    """
    Load a master resume from a YAML or JSON file.

    A file whose top level holds a single `master` key is unwrapped, so a
    workspace export containing master + variants can be passed directly.

    Args:
        path: Path to master resume file

    Returns:
        MasterResume instance

    Raises:
        FileNotFoundError: If path does not exist
        InvalidDocumentError: If the document has wrongly shaped fields
    """
    data = _load_mapping(path)
    if set(data) == {"master"}:
        data = data["master"]

    master = MasterResume.from_dict(data)
    _log_info(f"Master '{master.id or Path(path).stem}' loaded: {len(master.experience)} experience entries")
    return master


def load_variant(path: Union[str, Path]) -> VariantSpec:
    """
    Load and validate a variant specification from a YAML or JSON file.

    Args:
        path: Path to variant file

    Returns:
        Validated VariantSpec

    Raises:
        FileNotFoundError: If path does not exist
        VariantValidationError: If any rule, override or section setting is malformed
    """
    variant = VariantSpec.from_dict(_load_mapping(path))
    _log_info(
        f"Variant '{variant.name or variant.id}' loaded: "
        f"{len(variant.rules)} rules, {len(variant.overrides)} overrides"
    )
    return variant


def save_resume(resume: MasterResume, output_path: Union[str, Path]) -> Path:
    """
    Write a master or resolved resume to YAML.

    Args:
        resume: Document to save
        output_path: Destination file (parent directories are created)

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    OmegaConf.save(OmegaConf.create(resume.to_dict()), output_path)

    # Strip trailing blank lines for consistency
    content = output_path.read_text()
    output_path.write_text(content.rstrip() + "\n")

    _log_debug(f"Saved resume '{resume.id}' to {output_path}")
    return output_path


def resume_to_yaml(resume: MasterResume) -> str:
    """Render a resume as YAML text."""
    return OmegaConf.to_yaml(OmegaConf.create(resume.to_dict()))
