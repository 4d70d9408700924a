from setuptools import setup


setup(
    name='keycalc',
    use_scm_version={'fallback_version': '0.1.0'},
    description='Pocket calculator state machine',
    install_requires=[
        'regex',
        'prompt_toolkit',
        'structlog',
    ],
    packages=['keycalc'],
    package_dir={'': 'src'},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    setup_requires=[
        'setuptools_scm',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
            'coverage',
            'flake8',
            'mypy',
        ],
    },
    entry_points={
        'console_scripts': [
            'keycalc = keycalc.cli:main',
        ],
    },
    license='ISC',
)
