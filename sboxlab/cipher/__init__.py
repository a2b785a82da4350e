"""GF(2^8) arithmetic, affine S-box construction and AES-128 with a custom S-box.

Research / education only. Do NOT use in production.
"""
