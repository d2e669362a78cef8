"""
Tests for container wrapper detection (pathfinder/container.py).
"""

import os

import pytest

from pathfinder.config import ContainerConfig
from pathfinder.container import (
    base_image_tag,
    detect_container,
    is_container_wrapper,
    resolve_base_image,
)


@pytest.fixture
def container_config(tmp_path):
    return ContainerConfig(sources_root=str(tmp_path / "containers"))


def add_descriptor(config: ContainerConfig, name: str, text: str) -> None:
    context = os.path.join(config.sources_root, name)
    os.makedirs(context, exist_ok=True)
    with open(config.descriptor_path(name), "w", encoding="utf-8") as f:
        f.write(text)


class TestIsContainerWrapper:
    """Tests for the wrapper pattern match."""

    def test_generated_marker(self, container_config):
        head = b"#!/bin/sh\n# Auto-generated wrapper\nexec docker run --rm x\n"
        assert is_container_wrapper(head, container_config)

    def test_sources_root_with_run(self, container_config):
        head = f"#!/bin/sh\ncd {container_config.sources_root}/nmap && podman run nmap\n".encode()
        assert is_container_wrapper(head, container_config)

    def test_sources_root_without_run(self, container_config):
        head = f"#!/bin/sh\nls {container_config.sources_root}\n".encode()
        assert not is_container_wrapper(head, container_config)

    def test_run_without_sources_root(self, container_config):
        assert not is_container_wrapper(b"#!/bin/sh\ndocker run alpine\n", container_config)

    def test_custom_marker(self, tmp_path):
        config = ContainerConfig(sources_root=str(tmp_path), wrapper_marker="# managed by boxer")
        assert is_container_wrapper(b"# managed by boxer\n", config)
        assert not is_container_wrapper(b"# Auto-generated wrapper\n", config)


class TestBaseImageTag:
    """Tests for FROM line scanning."""

    def test_debian(self):
        assert base_image_tag("FROM debian:12\nRUN apt-get update\n") == "debian"

    def test_comments_and_args_before_from(self):
        text = "# syntax=docker/dockerfile:1\n# FROM ubuntu\nARG V=1\nFROM alpine:3.19\n"
        assert base_image_tag(text) == "alpine"

    def test_tag_order_not_position(self):
        """Test tags are checked in fixed order: alpine before python."""
        assert base_image_tag("FROM python:3.12-alpine\n") == "alpine"
        assert base_image_tag("FROM golang:1.22\n") == "go"

    def test_only_first_from_line(self):
        text = "FROM scratch AS base\nFROM ubuntu:24.04\n"
        assert base_image_tag(text) == ""

    def test_lowercase_directive_is_ignored(self):
        assert base_image_tag("from debian\nFROM kalilinux/kali-rolling\n") == "kali"

    def test_from_must_begin_the_line(self):
        """Test indented or glued FROM lines are not directives."""
        assert base_image_tag("   FROM debian:12\nFROM alpine:3.19\n") == "alpine"
        assert base_image_tag("FROMubuntu\n\tFROM kali\n") == ""
        assert base_image_tag("FROM\tnode:20\n") == "node"

    def test_no_from_line(self):
        assert base_image_tag("RUN echo hi\n") == ""
        assert base_image_tag("") == ""


class TestDetectContainer:
    """Tests for wrapper detection with descriptor lookup."""

    def test_wrapper_with_descriptor(self, tmp_path, container_config):
        add_descriptor(container_config, "nmap", "FROM debian:12\n")
        wrapper = tmp_path / "nmap"
        wrapper.write_text("#!/bin/sh\n# Auto-generated wrapper\nexec docker run nmap \"$@\"\n")
        assert detect_container(str(wrapper), container_config) == "debian"

    def test_wrapper_without_descriptor(self, tmp_path, container_config):
        wrapper = tmp_path / "tool"
        wrapper.write_text("# Auto-generated wrapper\n")
        assert detect_container(str(wrapper), container_config) == ""

    def test_marker_beyond_head_is_ignored(self, tmp_path, container_config):
        wrapper = tmp_path / "tool"
        wrapper.write_text("#!/bin/sh\n" + "#" * 600 + "\n# Auto-generated wrapper\n")
        assert detect_container(str(wrapper), container_config) is None

    def test_plain_script(self, tmp_path, container_config):
        script = tmp_path / "tool"
        script.write_text("#!/bin/sh\necho hi\n")
        assert detect_container(str(script), container_config) is None

    def test_missing_file(self, tmp_path, container_config):
        assert detect_container(str(tmp_path / "missing"), container_config) is None

    def test_resolve_base_image_uses_basename(self, container_config):
        add_descriptor(container_config, "scanner", "FROM ubuntu:22.04\n")
        assert resolve_base_image("/usr/local/bin/scanner", container_config) == "ubuntu"
