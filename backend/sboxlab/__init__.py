from .aes_engine import AES, AES_SBOX, STANDARD_SBOX, aes_decrypt, aes_encrypt
from .errors import (
    EncodingError,
    InvalidKey,
    InvalidKeyLength,
    MalformedCiphertext,
    MalformedSBox,
    PaddingError,
    SBoxLabError,
)
from .generator import GeneratedSBox, SBoxGenerator, build_sbox, generate_sbox
from .sbox_io import build_record, export_excel, load_sbox_file, parse_sbox_text, record_to_json
from .sbox_math import analyze, analyze_many, dap, is_balanced, is_bijective, nonlinearity, sac, sbox_math
from .schemas import AnalysisReport, MetricBundle, MetricRatings, SBoxCandidate, SBoxRecord, ValidSBox
