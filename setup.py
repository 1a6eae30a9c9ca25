from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="laneful-python",
    version="1.0.0",
    author="Laneful",
    author_email="support@laneful.com",
    description="Python SDK for the Laneful email API with webhook verification",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/lanefulhq/laneful-python",
    packages=find_packages(include=["laneful", "laneful.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Email",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "loguru>=0.7.0",
        "orjson>=3.9.0",
        "click>=8.0.0",
        "rich>=13.0.0",
        "fastapi>=0.100.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "laneful=laneful.cli:cli",
        ],
    },
)
