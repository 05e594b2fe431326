from __future__ import annotations

from typing import Dict, Optional

# IFD0 and Exif sub-IFD tags reported to the user; anything else is dropped.
EXIF_TAGS: Dict[int, str] = {
	# IFD0
	0x010E: "ImageDescription",
	0x010F: "Make",
	0x0110: "Model",
	0x0112: "Orientation",
	0x011A: "XResolution",
	0x011B: "YResolution",
	0x0128: "ResolutionUnit",
	0x0131: "Software",
	0x0132: "DateTime",
	0x013B: "Artist",
	0x0213: "YCbCrPositioning",
	0x8298: "Copyright",
	0x8769: "ExifIFD",
	0x8825: "GPSIFD",
	# Exif sub-IFD
	0x829A: "ExposureTime",
	0x829D: "FNumber",
	0x8822: "ExposureProgram",
	0x8827: "ISOSpeedRatings",
	0x9000: "ExifVersion",
	0x9003: "DateTimeOriginal",
	0x9004: "DateTimeDigitized",
	0x9010: "OffsetTime",
	0x9011: "OffsetTimeOriginal",
	0x9201: "ShutterSpeedValue",
	0x9202: "ApertureValue",
	0x9203: "BrightnessValue",
	0x9204: "ExposureBiasValue",
	0x9205: "MaxApertureValue",
	0x9206: "SubjectDistance",
	0x9207: "MeteringMode",
	0x9208: "LightSource",
	0x9209: "Flash",
	0x920A: "FocalLength",
	0xA001: "ColorSpace",
	0xA002: "PixelXDimension",
	0xA003: "PixelYDimension",
	0xA20E: "FocalPlaneXResolution",
	0xA210: "FocalPlaneResolutionUnit",
	0xA401: "CustomRendered",
	0xA402: "ExposureMode",
	0xA403: "WhiteBalance",
	0xA405: "FocalLengthIn35mmFilm",
	0xA406: "SceneCaptureType",
	0xA431: "BodySerialNumber",
	0xA433: "LensMake",
	0xA434: "LensModel",
}

EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825


def tag_name(tag: int) -> Optional[str]:
	return EXIF_TAGS.get(tag)
