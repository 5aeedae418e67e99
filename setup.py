from setuptools import setup, find_packages

setup(
    name="bw_locations",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    package_data={"bw_locations": ["data/*.json"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi<0.137",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "bw_locations=bw_locations.__main__:_safe_main",
        ],
    },
)
