"""Tools for PFS archives, WLD fragments and zone water maps."""

__version__ = "0.1.0"
__all__ = [
    "geometry",
    "pfs",
    "pfs_crc",
    "s3d_loader",
    "string_util",
    "water_map",
    "wld_fragment",
    "wld_hash",
    "wld_model",
]