from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

_originals = {}

# -- coordinate reference systems

# Which notation the srsName attributes use for feature info results:
# "legacy" = http://www.opengis.net/gml/srs/epsg.xml#4326 (what GML 2 clients expect)
# "urn" = urn:ogc:def:crs:EPSG::4326
# "epsg" = EPSG:4326
GISINFO_CRS_URI_STYLE = getattr(settings, "GISINFO_CRS_URI_STYLE", "legacy")

# -- output rendering

# Number of decimals to write for coordinates.
GISINFO_NUM_DECIMALS = getattr(settings, "GISINFO_NUM_DECIMALS", 8)

# Whether each feature gets a <gml:boundedBy> element.
GISINFO_FEATURE_BOUNDING = getattr(settings, "GISINFO_FEATURE_BOUNDING", False)

# Character encoding of the generated documents.
GISINFO_ENCODING = getattr(settings, "GISINFO_ENCODING", "UTF-8")

# The XML namespace for layers that don't define their own.
GISINFO_XML_NAMESPACE = getattr(settings, "GISINFO_XML_NAMESPACE", "http://example.org/gisinfo")
GISINFO_XML_NAMESPACE_PREFIX = getattr(settings, "GISINFO_XML_NAMESPACE_PREFIX", "app")

# Extra INFO_FORMAT handlers, as {"mime/type": "dotted.path.to.OutputFormatClass"}
GISINFO_EXTRA_OUTPUT_FORMATS = getattr(settings, "GISINFO_EXTRA_OUTPUT_FORMATS", {})


@receiver(setting_changed)
def _on_settings_change(setting, value, enter, **kwargs):
    if not setting.startswith("GISINFO_"):
        return

    conf_module = globals()
    if value is None and not enter:
        # override_settings().disable() returns what the django settings module had.
        # Revert to our defaults here instead.
        value = _originals.get(setting)
    else:
        # Track defaults of this file for reverting to them
        _originals.setdefault(setting, conf_module[setting])

    conf_module[setting] = value
