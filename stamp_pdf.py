#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Place stamp and signature images on PDF pages.
"""

# local repo modules
import pdf_stamp_placement.cli


if __name__ == "__main__":
	pdf_stamp_placement.cli.main()
