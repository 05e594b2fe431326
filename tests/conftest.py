from io import BytesIO

import piexif
import pytest
from PIL import Image


def encode_image(size, fmt):
	buf = BytesIO()
	Image.new("RGB", size, (120, 90, 60)).save(buf, format=fmt)
	return buf.getvalue()


def with_exif(jpeg_bytes, exif_dict):
	out = BytesIO()
	piexif.insert(piexif.dump(exif_dict), jpeg_bytes, out)
	return out.getvalue()


CAMERA_EXIF = {
	"0th": {
		piexif.ImageIFD.Make: b"Canon",
		piexif.ImageIFD.Model: b"Canon EOS 5D Mark IV",
		piexif.ImageIFD.Orientation: 1,
		piexif.ImageIFD.Software: b"Firmware 1.0.3",
	},
	"Exif": {
		piexif.ExifIFD.DateTimeOriginal: b"2023:07:14 18:32:05",
		piexif.ExifIFD.ExposureTime: (1, 125),
		piexif.ExifIFD.FNumber: (28, 10),
		piexif.ExifIFD.ISOSpeedRatings: 400,
		piexif.ExifIFD.FocalLength: (50, 1),
	},
}


@pytest.fixture
def png_bytes():
	return encode_image((1920, 1080), "PNG")


@pytest.fixture
def plain_jpeg_bytes():
	return encode_image((1000, 1000), "JPEG")


@pytest.fixture
def camera_jpeg_bytes():
	return with_exif(encode_image((64, 48), "JPEG"), CAMERA_EXIF)


@pytest.fixture
def rotated_jpeg_bytes():
	exif = {"0th": {piexif.ImageIFD.Orientation: 6, piexif.ImageIFD.Make: b"Pixel"}}
	return with_exif(encode_image((64, 48), "JPEG"), exif)
