#!/usr/bin/env python

import setuptools

setuptools.setup(
    name="readmark",
    version="0.3.0",
    author="Chen Yang",
    author_email="healthonrails@gmail.com",
    description="Word-level reading navigation and highlight state for paginated documents.",
    url="https://github.com/healthonrails/readmark",
    packages=setuptools.find_packages(include=["readmark", "readmark.*"]),
    package_data={"readmark": ["configs/*.yaml"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=['numpy>=1.18.2',
                      'PyYAML>=5.3',
                      'termcolor>=1.1.0',
                      'colorama>=0.4.3; platform_system=="Windows"',
                      'qtpy>=2.0',
                      ],
    extras_require={
        'pdf': ['pymupdf>=1.23'],
        'gui': ['PyQt5>=5.15'],
        'tests': ['pytest>=8.2'],
    },
    python_requires='>=3.10',

    entry_points={
        'console_scripts': [
            'readmark = readmark.main:main',
        ],
    },


)
