from setuptools import find_packages, setup

with open("README.md") as f:
    long_description = f.read()

setup(
    name="studydoc",
    version="0.1.0",
    packages=find_packages(exclude=["contrib", "docs", "tests", "tests.*"]),
    include_package_data=True,
    license="MIT License",
    description="Markdown and HTML to document tree conversion for study notes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=[
        "cssselect",
        "lxml",
        "markdown-it-py>=3.0",
        "typing_extensions",
    ],
    classifiers=[
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.10",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Processing :: Markup",
    ],
    extras_require={"test": ["pytest"]},
)
