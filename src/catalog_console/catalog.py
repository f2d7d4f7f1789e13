"""Entity descriptors for the catalog screens."""

from catalog_console.domain.descriptors import (
    AssetConstraints,
    Coercion,
    EntityTypeDescriptor,
    FieldSpec,
    IdStrategy,
)

MEGABYTE = 1024 * 1024
DEFAULT_MAX_VIDEO_BYTES = 100 * MEGABYTE
DEFAULT_MAX_IMAGE_BYTES = 10 * MEGABYTE

TESTIMONIAL_VIDEO_TYPES = frozenset(
    {
        "video/mp4",
        "video/webm",
        "video/ogg",
        "video/avi",
        "video/mov",
        "video/quicktime",
        "video/x-msvideo",
    }
)

VIDEO_CATEGORIES = (
    "Tutorial",
    "Course",
    "Webinar",
    "Demo",
    "Review",
    "Introduction",
    "Advanced",
    "Beginner",
)


def _story_fields(
    video: AssetConstraints, image: AssetConstraints, *, strict: bool
) -> tuple[FieldSpec, ...]:
    # Testimonials require the full profile; success stories only a name and age.
    return (
        FieldSpec("student", "Student Name", required=True),
        FieldSpec("age", "Age", required=True, coercion=Coercion.INTEGER),
        FieldSpec("location", "Location", required=strict),
        FieldSpec("timeframe", "Timeframe", required=strict),
        FieldSpec("revenue", "Revenue"),
        FieldSpec("growth", "Growth"),
        FieldSpec("videoUrl", "Video", wire_name="video_url", asset=video),
        FieldSpec("thumbnail", "Thumbnail", required=strict, asset=image),
        FieldSpec("duration", "Duration"),
        FieldSpec(
            "testimonialText",
            "Testimonial",
            required=strict,
            wire_name="testimonial",
        ),
        FieldSpec("beforeJob", "Previous Job", required=strict),
        FieldSpec("afterStatus", "Current Status", required=strict),
        FieldSpec("rating", "Rating", required=strict, coercion=Coercion.RATING),
        FieldSpec("joinDate", "Join Date", required=strict),
    )


def build_catalog(
    max_video_bytes: int = DEFAULT_MAX_VIDEO_BYTES,
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> dict[str, EntityTypeDescriptor]:
    """Return every entity descriptor keyed by its name."""
    image = AssetConstraints(frozenset({"image/*"}), max_image_bytes)
    any_video = AssetConstraints(frozenset({"video/*"}), max_video_bytes)
    testimonial_video = AssetConstraints(TESTIMONIAL_VIDEO_TYPES, max_video_bytes)

    descriptors = [
        EntityTypeDescriptor(
            name="testimonials",
            label="testimonial",
            collection="testimonials",
            namespace="testimonials",
            fields=_story_fields(testimonial_video, image, strict=True),
            id_strategy=IdStrategy.SEQUENTIAL,
        ),
        EntityTypeDescriptor(
            name="success",
            label="success story",
            collection="success",
            namespace="success",
            fields=_story_fields(any_video, image, strict=False),
            id_strategy=IdStrategy.TIMESTAMP,
        ),
        EntityTypeDescriptor(
            name="videos",
            label="video",
            collection="videos",
            namespace="videos",
            fields=(
                FieldSpec("title", "Video Title", required=True),
                FieldSpec("thumbnail", "Thumbnail", asset=image),
                FieldSpec(
                    "category",
                    "Category",
                    required=True,
                    coercion=Coercion.CHOICE,
                    choices=VIDEO_CATEGORIES,
                ),
                FieldSpec("views", "Views", coercion=Coercion.COUNT),
                FieldSpec(
                    "videoUrl",
                    "Video",
                    required=True,
                    wire_name="video_url",
                    asset=any_video,
                ),
            ),
            id_strategy=IdStrategy.NAMESPACED,
            id_prefix="video",
        ),
        EntityTypeDescriptor(
            name="responses",
            label="response",
            collection="responses",
            namespace="responses",
            fields=(
                FieldSpec("name", "Name"),
                FieldSpec("email", "Email"),
                FieldSpec("phoneNumber", "Phone Number"),
                FieldSpec("selectedCourse", "Selected Course"),
                FieldSpec("query", "Query"),
            ),
            read_only=True,
            authenticated_reads=True,
        ),
    ]
    return {descriptor.name: descriptor for descriptor in descriptors}
