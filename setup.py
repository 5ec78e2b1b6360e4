# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from setuptools import setup, find_packages

classifiers = [
    'Development Status :: 4 - Beta',
    'Environment :: Console',
    'Intended Audience :: Developers',
    'Intended Audience :: Education',
    'Intended Audience :: Science/Research',
    'License :: OSI Approved :: BSD License',
    'Natural Language :: English',
    'Operating System :: OS Independent',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3']

setup(
    name='pandaflow',
    version='0.1.0',
    description='Newton based AC load flow engine with discrete control outer loops.',
    long_description='AC load flow of power system networks: sparse equation system, '
                     'Newton-Raphson and Newton-Krylov solvers, and outer loops for distributed '
                     'slack, tap changers, shunts, reactive power limits and HVDC AC emulation.',
    long_description_content_type='text/plain',
    license='BSD',
    python_requires='>=3.9',
    install_requires=["pandas>=0.17",
                      "networkx>=2.5",
                      "scipy",
                      "numpy>=0.11",
                      "numba"],
    extras_require={
        "test": ["pytest", "pytest-xdist"]},
    packages=find_packages(include=["pandaflow", "pandaflow.*"]),
    include_package_data=True,
    classifiers=classifiers
)
