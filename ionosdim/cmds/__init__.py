#
#
#
