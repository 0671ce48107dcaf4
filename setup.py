from setuptools import setup, find_packages

setup(
    name="media-manager",
    version="0.1.0",
    description="Recommendation export for local media libraries",
    author="Media Manager Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=2.0.0",
        "pyyaml>=6.0",
        "scikit-learn>=1.3.0",
        "click>=8.1.0",
        "rich>=13.0.0",
        "librosa>=0.10.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ],
        "parquet": [
            "pyarrow>=12.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "media-manager=media_manager.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Sound/Audio",
    ],
    python_requires=">=3.10",
)
