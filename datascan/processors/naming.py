"""Dataset naming rules for each processor kind."""

from collections.abc import Callable
from pathlib import Path

from datascan.classifier.kinds import ProcessorKind


def name_from_file_stem(path: Path) -> str:
    return path.stem


def name_from_directory_stem(path: Path) -> str:
    return path.stem


def name_from_parent_directory(path: Path) -> str:
    """Bundled spectra directories and zipped S-folders are named after their parent."""
    return path.parent.name


def name_from_dataset_directory(path: Path) -> str:
    """Use the enclosing dataset directory, dropping a .d extension."""
    directory = path if path.is_dir() else path.parent
    name = directory.name
    if name.lower().endswith(".d"):
        return name[:-2]
    return name


def name_from_isos_file(path: Path) -> str:
    name = path.name
    if name.lower().endswith("_isos.csv"):
        return name[: -len("_isos.csv")]
    return path.stem


NAMING_RULES: dict[ProcessorKind, Callable[[Path], str]] = {
    ProcessorKind.BRUKER_ONE_FOLDER: name_from_parent_directory,
    ProcessorKind.BRUKER_XMASS_FOLDER: name_from_dataset_directory,
    ProcessorKind.AGILENT_GC_D_FOLDER: name_from_directory_stem,
    ProcessorKind.AGILENT_MASSHUNTER_D_FOLDER: name_from_directory_stem,
    ProcessorKind.AGILENT_ION_TRAP_D_FOLDER: name_from_directory_stem,
    ProcessorKind.WATERS_RAW_FOLDER: name_from_directory_stem,
    ProcessorKind.ZIPPED_IMAGING_FILES: name_from_dataset_directory,
    ProcessorKind.THERMO_RAW_FILE: name_from_file_stem,
    ProcessorKind.AGILENT_TOF_OR_QSTAR_FILE: name_from_file_stem,
    ProcessorKind.MZML_FILE: name_from_file_stem,
    ProcessorKind.UIMF_FILE: name_from_file_stem,
    ProcessorKind.DECONTOOLS_ISOS_FILE: name_from_isos_file,
    ProcessorKind.GENERIC_FILE: name_from_file_stem,
}


def dataset_name_for(kind: ProcessorKind, path: Path) -> str:
    return NAMING_RULES[kind](path)
