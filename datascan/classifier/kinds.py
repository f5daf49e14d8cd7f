"""Processor kinds recognised by the classifier."""

from dataclasses import dataclass
from enum import Enum


class ProcessorKind(Enum):
    """Dataset layouts that map to a dedicated processor."""

    BRUKER_ONE_FOLDER = "bruker_one_folder"
    BRUKER_XMASS_FOLDER = "bruker_xmass_folder"
    AGILENT_GC_D_FOLDER = "agilent_gc_d_folder"
    AGILENT_MASSHUNTER_D_FOLDER = "agilent_masshunter_d_folder"
    AGILENT_ION_TRAP_D_FOLDER = "agilent_ion_trap_d_folder"
    WATERS_RAW_FOLDER = "waters_raw_folder"
    ZIPPED_IMAGING_FILES = "zipped_imaging_files"
    THERMO_RAW_FILE = "thermo_raw_file"
    AGILENT_TOF_OR_QSTAR_FILE = "agilent_tof_or_qstar_file"
    MZML_FILE = "mzml_file"
    UIMF_FILE = "uimf_file"
    DECONTOOLS_ISOS_FILE = "decontools_isos_file"
    GENERIC_FILE = "generic_file"


@dataclass(frozen=True)
class Classification:
    kind: ProcessorKind
    is_directory: bool
