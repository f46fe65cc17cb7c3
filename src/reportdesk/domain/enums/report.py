from enum import Enum


class ReportType(str, Enum):
    LSOZ = "LSOZ"
    LSOS = "LSOS"
    LSOP = "LSOP"
    KROS_VOS = "KROS_VOS"
    KROS_VZS = "KROS_VZS"
    KROS = "KROS"


class FileFormat(str, Enum):
    TXT = "TXT"
    XLSX = "XLSX"
    XML = "XML"


class Currency(str, Enum):
    RUB = "RUB"
    FOREIGN = "FOREIGN"
