"""Fixed tables for GF(2^8) arithmetic, affine presets and AES-128.

Matrices are stored as 8 row bytes: bit j of row i is K[i][j].

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import Dict, Tuple

# x^8 + x^4 + x^3 + x + 1
IRREDUCIBLE_POLY = 0x11B
REDUCTION_BYTE = IRREDUCIBLE_POLY & 0xFF

# 0x63 = 01100011
AES_CONSTANT = 0x63

BLOCK_SIZE = 16
KEY_SIZE = 16
SBOX_SIZE = 256
MATRIX_ROWS = 8

NK = 4
NB = 4
NR = 10

# Multiplicative inverses under IRREDUCIBLE_POLY; entry 0 maps to 0 by convention.
INVERSE_TABLE: Tuple[int, ...] = (
    0,   1,   141, 246, 203, 82,  123, 209, 232, 79,  41,  192, 176, 225, 229, 199,
    116, 180, 170, 75,  153, 43,  96,  95,  88,  63,  253, 204, 255, 64,  238, 178,
    58,  110, 90,  241, 85,  77,  168, 201, 193, 10,  152, 21,  48,  68,  162, 194,
    44,  69,  146, 108, 243, 57,  102, 66,  242, 53,  32,  111, 119, 187, 89,  25,
    29,  254, 55,  103, 45,  49,  245, 105, 167, 100, 171, 19,  84,  37,  233, 9,
    237, 92,  5,   202, 76,  36,  135, 191, 24,  62,  34,  240, 81,  236, 97,  23,
    22,  94,  175, 211, 73,  166, 54,  67,  244, 71,  145, 223, 51,  147, 33,  59,
    121, 183, 151, 133, 16,  181, 186, 60,  182, 112, 208, 6,   161, 250, 129, 130,
    131, 126, 127, 128, 150, 115, 190, 86,  155, 158, 149, 217, 247, 2,   185, 164,
    222, 106, 50,  109, 216, 138, 132, 114, 42,  20,  159, 136, 249, 220, 137, 154,
    251, 124, 46,  195, 143, 184, 101, 72,  38,  200, 18,  74,  206, 231, 210, 98,
    12,  224, 31,  239, 17,  117, 120, 113, 165, 142, 118, 61,  189, 188, 134, 87,
    11,  40,  47,  163, 218, 212, 228, 15,  169, 39,  83,  4,   27,  252, 172, 230,
    122, 7,   174, 99,  197, 219, 226, 234, 148, 139, 196, 213, 157, 248, 144, 107,
    177, 13,  214, 235, 198, 14,  207, 173, 8,   78,  215, 227, 93,  80,  30,  179,
    91,  35,  56,  52,  104, 70,  3,   140, 221, 156, 125, 160, 205, 26,  65,  28,
)

# Optimised matrix from "AES S-box modification uses affine matrices exploration"
# (Alamsyah et al.). Produces S-box44.
K44_MATRIX = bytes([0x57, 0xAB, 0xD5, 0xEA, 0x75, 0xBA, 0x5D, 0xAE])

# The standard AES affine matrix as usually printed, most significant bit
# first (row 0 = [1 0 0 0 1 1 1 1]).
KAES_MATRIX_MSB_FIRST = bytes([0x8F, 0xC7, 0xE3, 0xF1, 0xF8, 0x7C, 0x3E, 0x1F])

# The same matrix with bit j of row i holding K[i][j], the layout every
# function in this package uses. Output bit i = x_i ^ x_{i+4} ^ ... ^ x_{i+7}.
KAES_MATRIX = bytes([0xF1, 0xE3, 0xC7, 0x8F, 0x1F, 0x3E, 0x7C, 0xF8])

PRESET_MATRICES: Dict[str, bytes] = {
    "K44": K44_MATRIX,
    "KAES": KAES_MATRIX,
}

EXPECTED_SBOX44 = bytes([
    0x63, 0x34, 0xA5, 0x21, 0x86, 0xE0, 0xE7, 0xB2, 0xC0, 0xFD, 0x64, 0x90, 0x02, 0x7D, 0xA8, 0xB9,
    0x24, 0xD7, 0x36, 0x28, 0x05, 0xCF, 0x84, 0x88, 0xA1, 0x6F, 0x37, 0xAF, 0x9C, 0x3E, 0xBE, 0xA9,
    0xED, 0x10, 0x0A, 0x08, 0xC9, 0x56, 0x9D, 0x2D, 0xC7, 0x22, 0x52, 0x94, 0xAC, 0xEB, 0xDC, 0x3B,
    0xE6, 0xBC, 0x13, 0xBB, 0xA3, 0x11, 0xFA, 0x95, 0xF4, 0x2E, 0xD9, 0x47, 0xD8, 0x14, 0xF6, 0xAB,
    0x7E, 0xCB, 0x85, 0xAD, 0xB1, 0xFB, 0xDD, 0x39, 0x5E, 0x51, 0x61, 0xEA, 0x9E, 0x5B, 0x97, 0xDE,
    0x42, 0x74, 0xE1, 0xD1, 0x01, 0x0C, 0xE4, 0xC1, 0xFC, 0x38, 0x72, 0x5F, 0x1C, 0x15, 0xD3, 0x3F,
    0x68, 0xDF, 0xB4, 0x19, 0x83, 0x09, 0xD2, 0xC2, 0x8A, 0x17, 0xEF, 0x26, 0x50, 0x44, 0x8E, 0xBA,
    0x4C, 0x2B, 0x91, 0x4F, 0x16, 0x80, 0x43, 0x93, 0x7C, 0xF1, 0xE5, 0x1D, 0x20, 0x1E, 0x9A, 0x66,
    0x31, 0x65, 0x32, 0xCD, 0xC6, 0x0D, 0x96, 0x35, 0xAE, 0x2C, 0x3A, 0x58, 0x76, 0xC8, 0xBF, 0xA2,
    0x71, 0xC5, 0x07, 0xEC, 0x0F, 0x8C, 0x18, 0x5A, 0x98, 0xC3, 0x7B, 0x27, 0xE2, 0xDA, 0x70, 0xF9,
    0x49, 0xCE, 0x4D, 0x6C, 0x0E, 0xE8, 0x06, 0xD4, 0xA7, 0x7A, 0xBD, 0x7F, 0x04, 0x03, 0x4E, 0x2F,
    0x5C, 0x2A, 0xD5, 0xE9, 0x41, 0x73, 0x1B, 0xA6, 0xF5, 0x59, 0x8F, 0xC4, 0x6A, 0x3D, 0xB3, 0x62,
    0x75, 0x33, 0x1A, 0x8B, 0xA4, 0x30, 0xFF, 0xA0, 0xCA, 0xF0, 0xB7, 0xB6, 0x00, 0x60, 0x48, 0x54,
    0xB0, 0x4A, 0xE3, 0x78, 0x12, 0xF3, 0x81, 0x6B, 0x6D, 0xDB, 0x45, 0x67, 0xD0, 0xB5, 0xB8, 0x92,
    0x55, 0x0B, 0x9B, 0x3C, 0xEE, 0xF7, 0x53, 0x1F, 0x89, 0xAA, 0xCC, 0xD6, 0x23, 0x4B, 0x82, 0xFE,
    0x5D, 0x25, 0x46, 0x79, 0x6E, 0x40, 0x9F, 0xF2, 0x8D, 0x87, 0x99, 0x77, 0xF8, 0x57, 0x69, 0x29,
])

AES_SBOX = bytes([
    0x63, 0x7c, 0x77, 0x7b, 0xf2, 0x6b, 0x6f, 0xc5, 0x30, 0x01, 0x67, 0x2b, 0xfe, 0xd7, 0xab, 0x76,
    0xca, 0x82, 0xc9, 0x7d, 0xfa, 0x59, 0x47, 0xf0, 0xad, 0xd4, 0xa2, 0xaf, 0x9c, 0xa4, 0x72, 0xc0,
    0xb7, 0xfd, 0x93, 0x26, 0x36, 0x3f, 0xf7, 0xcc, 0x34, 0xa5, 0xe5, 0xf1, 0x71, 0xd8, 0x31, 0x15,
    0x04, 0xc7, 0x23, 0xc3, 0x18, 0x96, 0x05, 0x9a, 0x07, 0x12, 0x80, 0xe2, 0xeb, 0x27, 0xb2, 0x75,
    0x09, 0x83, 0x2c, 0x1a, 0x1b, 0x6e, 0x5a, 0xa0, 0x52, 0x3b, 0xd6, 0xb3, 0x29, 0xe3, 0x2f, 0x84,
    0x53, 0xd1, 0x00, 0xed, 0x20, 0xfc, 0xb1, 0x5b, 0x6a, 0xcb, 0xbe, 0x39, 0x4a, 0x4c, 0x58, 0xcf,
    0xd0, 0xef, 0xaa, 0xfb, 0x43, 0x4d, 0x33, 0x85, 0x45, 0xf9, 0x02, 0x7f, 0x50, 0x3c, 0x9f, 0xa8,
    0x51, 0xa3, 0x40, 0x8f, 0x92, 0x9d, 0x38, 0xf5, 0xbc, 0xb6, 0xda, 0x21, 0x10, 0xff, 0xf3, 0xd2,
    0xcd, 0x0c, 0x13, 0xec, 0x5f, 0x97, 0x44, 0x17, 0xc4, 0xa7, 0x7e, 0x3d, 0x64, 0x5d, 0x19, 0x73,
    0x60, 0x81, 0x4f, 0xdc, 0x22, 0x2a, 0x90, 0x88, 0x46, 0xee, 0xb8, 0x14, 0xde, 0x5e, 0x0b, 0xdb,
    0xe0, 0x32, 0x3a, 0x0a, 0x49, 0x06, 0x24, 0x5c, 0xc2, 0xd3, 0xac, 0x62, 0x91, 0x95, 0xe4, 0x79,
    0xe7, 0xc8, 0x37, 0x6d, 0x8d, 0xd5, 0x4e, 0xa9, 0x6c, 0x56, 0xf4, 0xea, 0x65, 0x7a, 0xae, 0x08,
    0xba, 0x78, 0x25, 0x2e, 0x1c, 0xa6, 0xb4, 0xc6, 0xe8, 0xdd, 0x74, 0x1f, 0x4b, 0xbd, 0x8b, 0x8a,
    0x70, 0x3e, 0xb5, 0x66, 0x48, 0x03, 0xf6, 0x0e, 0x61, 0x35, 0x57, 0xb9, 0x86, 0xc1, 0x1d, 0x9e,
    0xe1, 0xf8, 0x98, 0x11, 0x69, 0xd9, 0x8e, 0x94, 0x9b, 0x1e, 0x87, 0xe9, 0xce, 0x55, 0x28, 0xdf,
    0x8c, 0xa1, 0x89, 0x0d, 0xbf, 0xe6, 0x42, 0x68, 0x41, 0x99, 0x2d, 0x0f, 0xb0, 0x54, 0xbb, 0x16,
])

RCON: Tuple[int, ...] = (0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1B, 0x36)

MIX_COLUMNS_MATRIX: Tuple[Tuple[int, ...], ...] = (
    (0x02, 0x03, 0x01, 0x01),
    (0x01, 0x02, 0x03, 0x01),
    (0x01, 0x01, 0x02, 0x03),
    (0x03, 0x01, 0x01, 0x02),
)

INV_MIX_COLUMNS_MATRIX: Tuple[Tuple[int, ...], ...] = (
    (0x0E, 0x0B, 0x0D, 0x09),
    (0x09, 0x0E, 0x0B, 0x0D),
    (0x0D, 0x09, 0x0E, 0x0B),
    (0x0B, 0x0D, 0x09, 0x0E),
)
