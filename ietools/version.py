# -*- coding: utf-8 -*-
VERSION = "1.0.0"
