"""
Container image reference helpers.
"""

from __future__ import annotations


def image_name(image: str) -> str:
    """
    Extract the bare image name from a container image reference.

    Examples:
        myimage:tag → myimage
        353146681200.dkr.ecr.us-west-2.amazonaws.com/cool-image:some-tag → cool-image
        registry:5000/team/app@sha256:abc → app
    """
    # Registry host and repository path come before the last "/"
    last_segment = image.rsplit("/", 1)[-1]
    # Digest, then tag
    last_segment = last_segment.split("@", 1)[0]
    return last_segment.split(":", 1)[0]
