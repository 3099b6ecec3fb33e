"""Shared names and defaults."""

CONFIG_SECTION = "bugscope"

INTERNAL_RULE_ID = "RuleFailure"

# GeneratedSubclassLeaked (AutoValue-style generated subclasses)
DEFAULT_MARKER_ANNOTATION = "AutoValue"
DEFAULT_GENERATED_PREFIX = "AutoValue_"

# RandomModInteger
DEFAULT_RANDOM_TYPE = "java.util.Random"
DEFAULT_RANDOM_METHOD = "nextInt"

DEFAULT_SUPPRESSION_ANNOTATION = "SuppressWarnings"

# Decorators the Python front end reads as provenance markers: @Generated("tool")
DEFAULT_GENERATED_MARKERS = ("Generated", "generated")

DEFAULT_MAX_WORKERS = 4
