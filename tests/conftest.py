import pytest

from presentation_lab.slide_models import SlideDescriptor, SlideKind


@pytest.fixture
def outline():
    return [
        SlideDescriptor(1, "Introduction", "Introduction of the company"),
        SlideDescriptor(2, "Our Services", "What the services include"),
        SlideDescriptor(3, "Resources & Media", "Links and photos", SlideKind.MEDIA),
    ]
