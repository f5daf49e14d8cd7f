"""Ordered classification rules mapping paths to processor kinds."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .kinds import Classification, ProcessorKind
from .probe import PathProbe

BRUKER_ONE_FOLDER_NAME = "1"

BRUKER_MARKER_FILES = (
    "analysis.baf",
    "analysis.tdf",
    "analysis.tsf",
    "ser",
    "fid",
    "analysis.baf_idx",
    "analysis.baf_xtr",
    "extension.baf",
    "Storage.mcf_idx",
)

AGILENT_GC_MARKER_FILES = ("DATA.MS", "acqmeth.txt", "GC.ini")

AGILENT_ACQDATA_DIRECTORY = "AcqData"

# Primary instrument files that identify a Bruker dataset on their own
BRUKER_PRIMARY_FILES = (
    "analysis.baf",
    "analysis.tdf",
    "analysis.tsf",
    "extension.baf",
    "storage.mcf_idx",
)

ZIPPED_IMAGING_PATTERN = "0_R*.zip"

_ZIPPED_S_FOLDER_RE = re.compile(r"s[0-9]+\.zip", re.IGNORECASE)

FILE_EXTENSION_KINDS: dict[str, ProcessorKind] = {
    ".raw": ProcessorKind.THERMO_RAW_FILE,
    ".wiff": ProcessorKind.AGILENT_TOF_OR_QSTAR_FILE,
    ".baf": ProcessorKind.BRUKER_XMASS_FOLDER,
    ".mcf": ProcessorKind.BRUKER_XMASS_FOLDER,
    ".mcf_idx": ProcessorKind.BRUKER_XMASS_FOLDER,
    ".mzml": ProcessorKind.MZML_FILE,
    ".uimf": ProcessorKind.UIMF_FILE,
}

DECONTOOLS_ISOS_SUFFIX = "_isos.csv"


def is_zipped_s_folder(name: str) -> bool:
    return _ZIPPED_S_FOLDER_RE.search(name) is not None


def is_zipped_imaging_file(name: str) -> bool:
    lower = name.lower()
    return lower.startswith("0_r") and lower.endswith(".zip")


@dataclass(frozen=True)
class ClassificationRule:
    description: str
    predicate: Callable[[PathProbe], bool]
    kind: ProcessorKind


def _extension_is(extension: str) -> Callable[[PathProbe], bool]:
    return lambda probe: probe.suffix == extension


def _d_directory_containing(markers: tuple[str, ...]) -> Callable[[PathProbe], bool]:
    return lambda probe: probe.suffix == ".d" and probe.contains_any_file(markers)


DIRECTORY_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        "bundled spectra directory named 1",
        lambda probe: probe.name == BRUKER_ONE_FOLDER_NAME,
        ProcessorKind.BRUKER_ONE_FOLDER,
    ),
    ClassificationRule(
        ".d directory with a Bruker marker file",
        _d_directory_containing(BRUKER_MARKER_FILES),
        ProcessorKind.BRUKER_XMASS_FOLDER,
    ),
    ClassificationRule(
        ".d directory with an Agilent GC marker file",
        _d_directory_containing(AGILENT_GC_MARKER_FILES),
        ProcessorKind.AGILENT_GC_D_FOLDER,
    ),
    ClassificationRule(
        ".d directory with an AcqData subdirectory",
        lambda probe: probe.suffix == ".d" and probe.contains_directory(AGILENT_ACQDATA_DIRECTORY),
        ProcessorKind.AGILENT_MASSHUNTER_D_FOLDER,
    ),
    ClassificationRule(
        ".raw directory",
        _extension_is(".raw"),
        ProcessorKind.WATERS_RAW_FOLDER,
    ),
    ClassificationRule(
        "directory holding zipped imaging files",
        lambda probe: probe.contains_file_matching(ZIPPED_IMAGING_PATTERN),
        ProcessorKind.ZIPPED_IMAGING_FILES,
    ),
    ClassificationRule(
        "other .d directory",
        _extension_is(".d"),
        ProcessorKind.AGILENT_ION_TRAP_D_FOLDER,
    ),
)

FILE_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        "Bruker primary instrument file",
        lambda probe: probe.lower_name in BRUKER_PRIMARY_FILES,
        ProcessorKind.BRUKER_XMASS_FOLDER,
    ),
    ClassificationRule(
        "Shimadzu GC .qgd file",
        _extension_is(".qgd"),
        ProcessorKind.GENERIC_FILE,
    ),
    ClassificationRule(
        "analysis.yep beside extension.baf",
        lambda probe: probe.lower_name == "analysis.yep" and probe.sibling_file_exists("extension.baf"),
        ProcessorKind.BRUKER_XMASS_FOLDER,
    ),
    ClassificationRule(
        "ser file inside a .d directory",
        lambda probe: probe.lower_name == "ser" and probe.parent_suffix == ".d",
        ProcessorKind.BRUKER_XMASS_FOLDER,
    ),
    *(
        ClassificationRule(f"{extension} file", _extension_is(extension), kind)
        for extension, kind in FILE_EXTENSION_KINDS.items()
    ),
    ClassificationRule(
        "DeconTools _isos.csv file",
        lambda probe: probe.lower_name.endswith(DECONTOOLS_ISOS_SUFFIX),
        ProcessorKind.DECONTOOLS_ISOS_FILE,
    ),
    ClassificationRule(
        "zipped S-folder",
        lambda probe: is_zipped_s_folder(probe.name),
        ProcessorKind.BRUKER_ONE_FOLDER,
    ),
    ClassificationRule(
        "zipped imaging file",
        lambda probe: is_zipped_imaging_file(probe.name),
        ProcessorKind.ZIPPED_IMAGING_FILES,
    ),
)


def classify_probe(probe: PathProbe) -> Classification | None:
    """Return the first matching classification for a probed path."""
    rules = DIRECTORY_RULES if probe.is_directory else FILE_RULES
    for rule in rules:
        if rule.predicate(probe):
            return Classification(kind=rule.kind, is_directory=probe.is_directory)
    return None


def classify(path: Path) -> Classification | None:
    return classify_probe(PathProbe(path))
