"""Known conversion types and the option keys each one accepts.

This table is reference data. Option values are never checked against it;
unknown conversion types simply accept any option bag.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# A field is either a tuple of permitted literals or a plain Python type.
OptionField = Union[Tuple[str, ...], type]
OptionSchema = Dict[str, OptionField]

PAGE_SIZE = ("A4", "B5", "Letter")
DELIMITER = ("comma", "semicolon", "vertical_bar", "tabulation")
ORIENTATION = ("Portrait", "Landscape")
COLOR_MODE = ("colored", "grayscale")
COLOR_MODE3 = ("colored", "grayscale", "monochrome")
BACKGROUND_COLOR = ("white", "transparent")
EXCEL_FORMAT = ("xlsx", "xls")
SPACE = ("0", "1s", "2s", "3s", "4s", "1t")
XML_ENCODING = ("utf-8", "utf-16le", "utf-16be")
BITRATE = ("default", "96", "128", "160", "192", "256", "320")
BIT_DEPTH = ("8", "16", "24", "32")
AUDIO_CHANNELS = ("default", "1", "2")
SAMPLING_RATE = ("default", "8000", "16000", "44100", "48000")
IMAGE_RESOLUTION = ("72", "150", "300", "600")
PREFIX = ("@", "#", "_", "__")

# Every conversion accepts these.
BASE: OptionSchema = {"sandbox": bool, "file_id": str}

OCR: OptionSchema = {"language_ocr": str}
TO_MP3: OptionSchema = {"bitrate": BITRATE}
TO_WAV: OptionSchema = {
    "sampling_rate": SAMPLING_RATE,
    "bit_depth": BIT_DEPTH,
    "audio_channels": AUDIO_CHANNELS,
}
WEBSITE_TO_PDF: OptionSchema = {
    "url": str,
    "orientation": ORIENTATION,
    "pagesize": PAGE_SIZE,
    "colormode": COLOR_MODE,
    "background": bool,
    "images": bool,
    "javascript": bool,
}
WEBSITE_TO_IMAGE: OptionSchema = {"url": str, "images": bool, "javascript": bool}
HTML_TABLE_TO_CSV: OptionSchema = {"url": str, "delimiter": DELIMITER}
WITH_ORIENTATION: OptionSchema = {"orientation": ORIENTATION}
EXCEL_TO_HTML: OptionSchema = {
    "recalculate": bool,
    "make_sortable": bool,
    "title_overview": str,
    "title_sheet": str,
}
DELIMITED: OptionSchema = {"delimiter": DELIMITER, "quote": bool}
DELIMITER_ONLY: OptionSchema = {"delimiter": DELIMITER}
CSV_TO_EXCEL: OptionSchema = {"delimiter": DELIMITER, "excel_format": EXCEL_FORMAT}
TO_XML: OptionSchema = {
    "header": bool,
    "show_columns": bool,
    "index_records": bool,
    "add_empty_nodes": bool,
    "short_tag_empty_node": bool,
    "xml_encoding": XML_ENCODING,
}
CSV_TO_XML: OptionSchema = {"delimiter": DELIMITER, **TO_XML}
XML_TO_JSON: OptionSchema = {
    "space": SPACE,
    "prefix_attr": PREFIX,
    "prefix_text": PREFIX,
    "attr_always_object": bool,
    "text_always_object": bool,
}
XML_TO_EXCEL: OptionSchema = {"split_excel_rows_limit": bool, "excel_format": EXCEL_FORMAT}
EXCEL_FORMAT_ONLY: OptionSchema = {"excel_format": EXCEL_FORMAT}
PDF_TO_JPG: OptionSchema = {
    "image_resolution": IMAGE_RESOLUTION,
    "jpeg_quality": int,
    "colormode": COLOR_MODE,
    "progressive_jpeg": bool,
}
PDF_TO_PNG: OptionSchema = {
    "image_resolution": IMAGE_RESOLUTION,
    "colormode3": COLOR_MODE3,
    "background_color": BACKGROUND_COLOR,
}
TO_SVG: OptionSchema = {"image_resolution": IMAGE_RESOLUTION, "pagesize": PAGE_SIZE}
JPEG_QUALITY: OptionSchema = {"jpeg_quality": int}
WEBP_QUALITY: OptionSchema = {"webp_quality": int}
SPACE_ONLY: OptionSchema = {"space": SPACE}
NONE: OptionSchema = {}


def _each(schema: OptionSchema, *types: str) -> Dict[str, OptionSchema]:
    return {f"convert.{name}": schema for name in types}


CONVERSION_OPTIONS: Dict[str, OptionSchema] = {
    **_each(OCR, "ocr_png_to_text", "ocr_jpg_to_text", "ocr_png_to_pdf", "ocr_jpg_to_pdf",
            "ocr_pdf_to_text", "ocr_pdf_to_pdf"),
    **_each(TO_MP3, "mp4_to_mp3", "wav_to_mp3", "flac_to_mp3"),
    **_each(TO_WAV, "mp3_to_wav", "flac_to_wav"),
    **_each(NONE, "wav_to_flac"),
    **_each(WEBSITE_TO_PDF, "website_to_pdf"),
    **_each(NONE, "word_to_pdf", "powerpoint_to_pdf", "oxps_to_pdf", "word_to_text",
            "powerpoint_to_text"),
    **_each(WITH_ORIENTATION, "jpg_to_pdf", "png_to_pdf"),
    **_each(NONE, "markdown_to_pdf", "markdown_to_html", "markdown_to_epub"),
    **_each(WEBSITE_TO_IMAGE, "website_to_jpg", "html_to_jpg", "website_to_png", "html_to_png"),
    **_each(HTML_TABLE_TO_CSV, "html_table_to_csv"),
    **_each(WITH_ORIENTATION, "excel_to_pdf", "ods_to_pdf"),
    **_each(EXCEL_TO_HTML, "excel_to_html"),
    **_each(DELIMITED, "excel_to_csv", "xml_to_csv", "pdf_to_csv", "json_to_csv",
            "json_objects_to_csv", "srt_to_csv"),
    **_each(NONE, "excel_to_ods", "ods_to_excel", "pdf_to_excel"),
    **_each(TO_XML, "excel_to_xml", "excel_to_json"),
    **_each(DELIMITER_ONLY, "ods_to_csv"),
    **_each(CSV_TO_EXCEL, "csv_to_excel"),
    **_each(CSV_TO_XML, "csv_to_xml"),
    **_each(XML_TO_JSON, "xml_to_json"),
    **_each(XML_TO_EXCEL, "xml_to_excel"),
    **_each(EXCEL_FORMAT_ONLY, "excel_xml_to_excel_xlsx", "json_to_excel",
            "json_objects_to_excel", "srt_to_excel"),
    **_each(PDF_TO_JPG, "pdf_to_jpg"),
    **_each(PDF_TO_PNG, "pdf_to_png", "pdf_to_tiff"),
    **_each(TO_SVG, "pdf_to_svg", "png_to_svg"),
    **_each(NONE, "pdf_to_html", "pdf_to_text", "pdf_to_word"),
    **_each(NONE, "png_to_jpg", "jpg_to_png", "heic_to_png"),
    **_each(JPEG_QUALITY, "heic_to_jpg"),
    **_each(WEBP_QUALITY, "png_to_webp", "jpg_to_webp", "tiff_to_webp", "gif_to_webp",
            "jpg_to_avif", "png_to_avif"),
    **_each(NONE, "webp_to_png", "webp_to_tiff", "webp_to_bmp", "webp_to_yuv", "webp_to_pam",
            "webp_to_pgm", "webp_to_ppm", "avif_to_png", "avif_to_jpg"),
    **_each(NONE, "epub_to_mobi", "epub_to_azw", "mobi_to_epub", "mobi_to_azw", "azw_to_epub",
            "azw_to_mobi", "epub_to_pdf", "mobi_to_pdf", "azw_to_pdf", "azw3_to_pdf",
            "fb2_to_pdf", "fbz_to_pdf", "pdf_to_epub", "pdf_to_mobi", "pdf_to_azw",
            "pdf_to_azw3", "pdf_to_fb2", "pdf_to_fbz"),
    **_each(NONE, "mov_to_mp4", "mkv_to_mp4", "avi_to_mp4"),
    **_each(NONE, "remove_exif", "validate_json", "fix_xml_escaping", "json_to_yaml"),
    **_each(SPACE_ONLY, "format_json", "json_to_xml", "yaml_to_json"),
}


def option_schema(conversion_type: str) -> Optional[OptionSchema]:
    """Return the accepted options of a known type, or None for an untyped bag."""
    schema = CONVERSION_OPTIONS.get(conversion_type)
    if schema is None:
        return None
    return {**BASE, "url": str, **schema}


def unknown_option_keys(conversion_type: str, options: Mapping[str, Any]) -> List[str]:
    """Keys the catalog does not list for ``conversion_type``.

    Always empty for conversion types missing from the catalog.
    """
    schema = option_schema(conversion_type)
    if schema is None:
        return []
    return sorted(key for key in options if key not in schema)


def known_conversion_types() -> List[str]:
    return sorted(CONVERSION_OPTIONS)
