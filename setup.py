from setuptools import setup, find_packages

setup(
    name="uiauto-android",
    version="1.0.0",
    packages=find_packages(include=["uiauto_android", "uiauto_android.*"]),
    install_requires=[
        "lxml>=4.9",
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
        "pillow>=8.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    package_data={
        "uiauto_android": ["schemas/*.json"],
    },
    entry_points={
        "console_scripts": [
            "uiauto-android=uiauto_android.cli:main",
        ],
    },
)
